from cose_hpke.cli import app

app(prog_name="cose-hpke")
