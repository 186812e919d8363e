"""
Input validation utilities.

Every check here runs before the engine mutates any state, so a rejected
call leaves the engine exactly as it was.
"""

from numbers import Integral
from typing import Optional, Union, Sequence
import torch
from torch import Tensor
import numpy as np

from ..base.exceptions import InvalidArgument

ArrayLike = Union[Tensor, np.ndarray, Sequence[float]]


def _is_int(value) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def check_dtype(dtype: torch.dtype) -> torch.dtype:
    """Validate the numeric element type of the engine.

    Args:
        dtype: A real floating point or integer torch dtype

    Returns:
        The same dtype

    Raises:
        TypeError: If dtype is not a torch.dtype
        InvalidArgument: For bool or complex dtypes
    """
    if not isinstance(dtype, torch.dtype):
        raise TypeError(f"dtype must be a torch.dtype, got {type(dtype)}")

    if dtype == torch.bool or dtype.is_complex:
        raise InvalidArgument(f"dtype must be a real numeric type, got {dtype}")

    return dtype


def max_representable(dtype: torch.dtype) -> Union[int, float]:
    """Largest finite value of a dtype."""
    if dtype.is_floating_point:
        return torch.finfo(dtype).max
    return torch.iinfo(dtype).max


def accumulator_dtype(dtype: torch.dtype,
                      device: Optional[torch.device] = None) -> torch.dtype:
    """Wide dtype for sums and squared differences of ``dtype`` values.

    Integer data widens to int64 (which also stops unsigned subtraction from
    wrapping), floating point data to float64. MPS has no float64.
    """
    if dtype.is_floating_point:
        if device is not None and torch.device(device).type == 'mps':
            return torch.float32
        return torch.float64
    return torch.int64


def check_stride(stride: int) -> int:
    """Validate the dimensionality of the points.

    Raises:
        InvalidArgument: If stride is not a positive integer
    """
    if not _is_int(stride):
        raise InvalidArgument(f"stride must be an int, got {type(stride).__name__}")

    if stride <= 0:
        raise InvalidArgument(f"stride must be positive, got {stride}")

    return int(stride)


def check_n_clusters(n_clusters: int) -> int:
    """Validate number of clusters.

    Raises:
        InvalidArgument: If n_clusters is not a positive integer
    """
    if not _is_int(n_clusters):
        raise InvalidArgument(f"n_clusters must be int, got {type(n_clusters).__name__}")

    if n_clusters <= 0:
        raise InvalidArgument(f"n_clusters must be positive, got {n_clusters}")

    return int(n_clusters)


def to_tensor(values: ArrayLike,
              dtype: torch.dtype = torch.float32,
              device: Optional[torch.device] = None) -> Tensor:
    """Convert input data to a tensor of the engine's dtype.

    Non-finite floating point input is rejected before the cast, so NaN
    never turns into an arbitrary integer.

    Raises:
        InvalidArgument: For None, non-numeric or non-finite input
    """
    if values is None:
        raise InvalidArgument("Input data is None")

    try:
        if isinstance(values, Tensor):
            source = values.detach()
        else:
            # numpy keeps float64 precision for plain Python lists
            source = torch.as_tensor(np.asarray(values))
    except (TypeError, ValueError, RuntimeError) as exc:
        raise InvalidArgument(f"Cannot convert {type(values).__name__} to tensor: {exc}") from exc

    if source.dtype == torch.bool or source.is_complex():
        raise InvalidArgument(f"Input must be real numbers, got {source.dtype}")

    if source.is_floating_point() and source.numel() > 0:
        if not torch.isfinite(source).all():
            raise InvalidArgument("Input contains NaN or infinite values")

    return source.to(dtype=dtype, device=device)


def validate_flat_values(values: ArrayLike,
                         stride: int,
                         length: Optional[int] = None,
                         dtype: torch.dtype = torch.float32,
                         device: Optional[torch.device] = None) -> Tensor:
    """Validate a flat sequence and partition it into points.

    Args:
        values: Flat sequence of coordinates, point after point
        stride: Number of coordinates per point
        length: Number of leading values to use (default: all of them)
        dtype: Target data type
        device: Target device

    Returns:
        (length // stride, stride) tensor owned by the caller

    Raises:
        InvalidArgument: If the input is empty, the stride is not positive,
            length exceeds the input or is not a multiple of stride
    """
    stride = check_stride(stride)
    flat = to_tensor(values, dtype=dtype, device=device)

    if flat.dim() != 1:
        raise InvalidArgument(f"Expected a flat 1D sequence, got {flat.dim()}D "
                              f"with shape {tuple(flat.shape)}")

    total = flat.shape[0]
    if total == 0:
        raise InvalidArgument("Input sequence is empty")

    if length is None:
        length = total
    elif not _is_int(length):
        raise InvalidArgument(f"length must be an int, got {type(length).__name__}")

    if length <= 0:
        raise InvalidArgument(f"length must be positive, got {length}")

    if length > total:
        raise InvalidArgument(f"length {length} exceeds the {total} values supplied")

    if length % stride != 0:
        raise InvalidArgument(f"length {length} is not divisible by stride {stride} "
                              f"({length % stride} trailing values)")

    return flat[:length].reshape(length // stride, stride).clone()


def validate_centers(centers: ArrayLike,
                     n_clusters: int,
                     dimension: int,
                     dtype: torch.dtype = torch.float32,
                     device: Optional[torch.device] = None) -> Tensor:
    """Validate explicit starting centers.

    Returns:
        (n_clusters, dimension) tensor

    Raises:
        InvalidArgument: On shape mismatch or non-finite values
    """
    tensor = to_tensor(centers, dtype=dtype, device=device)

    if tensor.dim() != 2:
        raise InvalidArgument(f"Centers must be 2D, got {tensor.dim()}D")

    if tensor.shape[0] != n_clusters:
        raise InvalidArgument(f"Initial centers has {tensor.shape[0]} clusters, "
                              f"but n_clusters={n_clusters}")
    if tensor.shape[1] != dimension:
        raise InvalidArgument(f"Initial centers has dimension {tensor.shape[1]}, "
                              f"but data has dimension {dimension}")

    return tensor.clone()


def check_random_state(random_state: Optional[Union[int, torch.Generator]],
                       device: Optional[torch.device] = None) -> Optional[torch.Generator]:
    """Create generator from random state.

    Args:
        random_state: Seed or generator
        device: Device the generator draws on

    Returns:
        Generator or None (use the global torch RNG)
    """
    if random_state is None:
        return None
    elif _is_int(random_state):
        generator = torch.Generator(device=device if device is not None else 'cpu')
        generator.manual_seed(int(random_state))
        return generator
    elif isinstance(random_state, torch.Generator):
        return random_state
    else:
        raise TypeError(f"random_state must be int or Generator, got {type(random_state)}")
