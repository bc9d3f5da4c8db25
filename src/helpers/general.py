"""
Auxiliary functions
"""

import logging
import coloredlogs
import polars as pl

from helpers.konfig import settings


def generate_log(name: str, log_level: str | None = None) -> logging.Logger:
    """
    Generate a logger with the specified name and log level.

    Args:
        name (str): The name of the logger.
        log_level (str, optional): The log level. Defaults to the configured `log_level`.

    Returns:
        logging.Logger: The generated logger.
    """
    if log_level is None:
        log_level = settings.log_level
    log = logging.getLogger(name)
    coloredlogs.install(level=log_level)
    return log


def pl_to_dict(df: pl.DataFrame) -> dict:
    """
    Convert a Polars DataFrame with two columns into a dictionary. It is assumed that the
    first column contains the keys and the second column contains the values. The keys must
    be unique but Null values will be filtered.

    Args:
        df (pl.DataFrame): Polars DataFrame with two columns.

    Returns:
        dict: Dictionary representation of the DataFrame.

    Raises:
        ValueError: If the DataFrame does not have exactly two columns or if the keys are not unique.
    """

    if df.shape[1] != 2:
        raise ValueError("DataFrame is not composed of two columns")

    columns_name = df.columns[0]
    df = df.drop_nulls(columns_name)
    if df[columns_name].is_duplicated().sum() != 0:
        raise ValueError("Key values are not unique")
    return dict(df.rows())
