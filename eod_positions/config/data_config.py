#!filepath: eod_positions/config/data_config.py
from pydantic import BaseModel


class DataConfig(BaseModel):
    """
    Where the batch files live. File names are relative to data_dir unless absolute.
    """
    data_dir: str = "."
    positions_file: str = "Input_StartOfDay_Positions.txt"
    transactions_file: str = "Input_Transactions.txt"
    output_file: str = "Expected_EndOfDay_Positions.txt"
    errors_file: str = "Input_StartOfDay_Positions_Error_Records.txt"
    encoding: str = "utf-8"
