"""
Numerical preprocessing of the chance-constrained OPF: voltage sensitivity matrices,
their inverses and the matrix square roots of the covariance and of the quadratic cost.
"""

from dataclasses import dataclass
import numpy as np
from scipy import linalg

from helpers.general import generate_log

log = generate_log(name=__name__)

SYMMETRY_TOLERANCE: float = 1e-9
PSD_TOLERANCE: float = 1e-9


class NumericalPreconditionError(ValueError):
    """A matrix required by the model is not positive (semi-)definite or not invertible"""


@dataclass(frozen=True)
class SensitivityMatrices:
    A: np.ndarray  # path matrix over non-root buses
    A_check: np.ndarray  # A⁻¹
    R: np.ndarray  # A' R_d A
    R_check: np.ndarray  # R⁻¹
    Σ_rt: np.ndarray  # Σ[non-root, non-root]^{1/2}
    s: float  # sqrt(sum(Σ[non-root, non-root]))
    F: np.ndarray  # C^{1/2}, diagonal

    @property
    def eΣ_rt(self) -> np.ndarray:
        return np.ones(self.Σ_rt.shape[0]) @ self.Σ_rt

    @property
    def RΣ_rt(self) -> np.ndarray:
        return self.R @ self.Σ_rt

    @property
    def AΣ_rt(self) -> np.ndarray:
        return self.A @ self.Σ_rt


def psd_square_root(matrix: np.ndarray, name: str) -> np.ndarray:
    """
    Symmetric square root of a positive semi-definite matrix, computed from its
    eigendecomposition so that the result stays real and symmetric.

    Raises:
        NumericalPreconditionError: If the matrix is not symmetric or has a negative eigenvalue.
    """
    if not np.allclose(matrix, matrix.T, atol=SYMMETRY_TOLERANCE):
        raise NumericalPreconditionError(f"{name} is not symmetric")
    eigenvalues, eigenvectors = linalg.eigh(matrix)
    scale = max(1.0, float(np.abs(eigenvalues).max(initial=0.0)))
    if eigenvalues.min(initial=0.0) < -PSD_TOLERANCE * scale:
        raise NumericalPreconditionError(
            f"{name} is not positive semi-definite (smallest eigenvalue {eigenvalues.min():.3e})"
        )
    root = eigenvectors @ np.diag(np.sqrt(np.clip(eigenvalues, 0.0, None))) @ eigenvectors.T
    return (root + root.T) / 2


def compute_sensitivity_matrices(
    path_matrix: np.ndarray,
    resistance: np.ndarray,
    covariance: np.ndarray,
    root_position: int,
    quad_cost: np.ndarray,
) -> SensitivityMatrices:
    """
    Derive the linear-algebra objects of the model.

    Args:
        path_matrix (np.ndarray): Ancestry matrix over non-root buses.
        resistance (np.ndarray): Line resistances, ordered as the rows of `path_matrix`.
        covariance (np.ndarray): Covariance matrix over every bus, bus order.
        root_position (int): Position of the root bus in the bus order.
        quad_cost (np.ndarray): Diagonal of the quadratic cost matrix, bus order.

    Returns:
        SensitivityMatrices: The derived matrices.

    Raises:
        NumericalPreconditionError: If `R` is not positive definite, the path matrix is singular,
        the non-root covariance is not positive semi-definite or a quadratic cost is negative.
    """
    A = path_matrix
    R = A.T @ np.diag(resistance) @ A
    try:
        linalg.cholesky(R)
    except linalg.LinAlgError as error:
        raise NumericalPreconditionError(
            "Voltage sensitivity matrix R is not positive definite"
        ) from error
    R_check = linalg.inv(R)
    try:
        A_check = linalg.inv(A)
    except linalg.LinAlgError as error:
        raise NumericalPreconditionError("Path matrix A is singular") from error

    non_root = np.delete(np.arange(covariance.shape[0]), root_position)
    Σ_non_root = covariance[np.ix_(non_root, non_root)]
    Σ_rt = psd_square_root(Σ_non_root, name="Covariance matrix Σ")
    s = float(np.sqrt(max(Σ_non_root.sum(), 0.0)))

    if (quad_cost < 0).any():
        raise NumericalPreconditionError("Quadratic cost matrix C has negative entries")
    F = np.diag(np.sqrt(quad_cost))

    log.debug(f"Sensitivity matrices computed for {A.shape[0]} lines, s = {s:.4e}")
    return SensitivityMatrices(A=A, A_check=A_check, R=R, R_check=R_check, Σ_rt=Σ_rt, s=s, F=F)
