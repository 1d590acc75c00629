from .diagnostic import diagnose
from .decoding import loads_exact, is_map, is_array
