from helpers.general import generate_log, pl_to_dict

__all__ = ["generate_log", "pl_to_dict"]
