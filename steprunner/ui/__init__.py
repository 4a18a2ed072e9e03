from .console import Operator, RichOperator

__all__ = ["Operator", "RichOperator"]
