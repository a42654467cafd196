from .impl import Widget

__all__ = ["Widget"]
