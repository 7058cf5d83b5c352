from eod_positions.cli import app

app(prog_name="eod-positions")
