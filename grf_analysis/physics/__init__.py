from .asymmetry import asymmetry_index_pct, compute_asymmetry
from .balance import combined_cop, compute_cop_metrics
from .kinematics import G, compute_displacement, compute_velocity, rate_of_force_development
from .metrics import calculate, jump_height_from_flight_cm, jump_height_from_velocity_cm

__all__ = [
    "G",
    "asymmetry_index_pct",
    "calculate",
    "combined_cop",
    "compute_asymmetry",
    "compute_cop_metrics",
    "compute_displacement",
    "compute_velocity",
    "jump_height_from_flight_cm",
    "jump_height_from_velocity_cm",
    "rate_of_force_development",
]
