"""
Device and worker selection utilities.

The engine runs on the CPU unless told otherwise. A CUDA or MPS device may be
requested; when it is not present the engine falls back to the CPU with a
warning.
"""

from typing import Optional, Union
import os
import warnings
import torch


def get_default_device() -> torch.device:
    """Best available device: cuda, then mps, then cpu."""
    if torch.cuda.is_available():
        return torch.device('cuda')
    if hasattr(torch.backends, 'mps') and torch.backends.mps.is_available():
        return torch.device('mps')
    return torch.device('cpu')


def _available(device: torch.device) -> bool:
    if device.type == 'cuda':
        return torch.cuda.is_available()
    if device.type == 'mps':
        return hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()
    return device.type == 'cpu'


def parse_device(device: Optional[Union[str, torch.device]] = None) -> torch.device:
    """Resolve the device the engine stores its tensors on.

    Args:
        device: None or 'cpu' for the CPU, 'auto' for the best available
            device, or any cuda/mps name or torch.device

    Returns:
        Parsed device

    Raises:
        TypeError: If device is neither a str nor a torch.device
        ValueError: For an unrecognized device name
    """
    if device is None:
        return torch.device('cpu')

    if isinstance(device, str):
        if device == 'auto':
            return get_default_device()
        try:
            device = torch.device(device)
        except RuntimeError as e:
            raise ValueError(f"Unknown device: {device}") from e
    elif not isinstance(device, torch.device):
        raise TypeError(f"Device must be str or torch.device, got {type(device)}")

    if device.type not in ('cpu', 'cuda', 'mps'):
        raise ValueError(f"Unsupported device type: {device.type}")

    if not _available(device):
        warnings.warn(f"{device.type.upper()} not available, falling back to CPU")
        return torch.device('cpu')

    return device


def get_worker_count(n_jobs: Optional[int] = None) -> int:
    """Resolve an n_jobs setting to a number of worker threads.

    Args:
        n_jobs: None or 1 for sequential, -1 for one worker per logical
            processor, -2 for all but one, any positive int as-is

    Returns:
        Number of workers (>= 1)
    """
    if n_jobs is None:
        return 1

    if not isinstance(n_jobs, int) or isinstance(n_jobs, bool) or n_jobs == 0:
        raise ValueError(f"n_jobs must be a non-zero int or None, got {n_jobs!r}")

    if n_jobs > 0:
        return n_jobs

    cpu_count = os.cpu_count() or 1
    return max(1, cpu_count + 1 + n_jobs)
