from .assessment import assess, windowed_force_cv

__all__ = ["assess", "windowed_force_cv"]
