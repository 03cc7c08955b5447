from .lab_error import LabError

__all__ = ["LabError"]
