from .suite import SuiteConfig, SUITES, HPKE_4, HPKE_7, resolve, suite_from_algorithm, suite_for_key
