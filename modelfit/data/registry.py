"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, MutableMapping, Tuple

from ..core.types import Array
from .utils import SplitIndices

TASK_TYPES = ("regression", "classification")


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Number of values in each input vector.
    d_out:
        Number of values in each target vector.
    task_type:
        One of ``{"regression", "classification"}``; selects the default
        evaluation metrics.
    normalization:
        Metadata describing scaling applied to the inputs or targets. The
        registry does not interpret these values but keeping them with the
        run allows predictions to be mapped back.
    extra:
        Free-form metadata such as the numeric aliases given to text columns.
    """

    d_in: int
    d_out: int
    task_type: str
    normalization: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """A fully loaded dataset: paired input/target rows plus split indices."""

    name: str
    inputs: Array
    targets: Array
    data_spec: DataSpec
    provenance: Dict[str, Any]
    splits: SplitIndices

    def split(self, name: str) -> Tuple[Array, Array]:
        """Return the ``(inputs, targets)`` rows of split ``name``."""

        if name not in {"train", "val"}:
            raise ValueError(f"Unknown split: {name}")
        indices = getattr(self.splits, name)
        return self.inputs[indices], self.targets[indices]

    def training_pairs(self, name: str = "train") -> Tuple[List[Array], List[Array]]:
        """Return split ``name`` as parallel lists of vectors."""

        inputs, targets = self.split(name)
        return list(inputs), list(targets)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str | None = None, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset is None:
        if "name" in options:
            dataset = str(options.pop("name"))
        else:
            raise TypeError("Dataset name must be provided")

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.task_type not in TASK_TYPES:
        raise ValueError(f"Invalid task type: {spec.data_spec.task_type}")
    if spec.inputs.ndim != 2 or spec.targets.ndim != 2:
        raise ValueError("Dataset inputs and targets must be 2-D arrays")
    if spec.inputs.shape[0] != spec.targets.shape[0]:
        raise ValueError(
            f"Dataset {spec.name!r} has {spec.inputs.shape[0]} input rows but "
            f"{spec.targets.shape[0]} target rows"
        )
    if spec.inputs.shape[1] != spec.data_spec.d_in:
        raise ValueError(f"Dataset {spec.name!r} inputs do not match d_in={spec.data_spec.d_in}")
    if spec.targets.shape[1] != spec.data_spec.d_out:
        raise ValueError(
            f"Dataset {spec.name!r} targets do not match d_out={spec.data_spec.d_out}"
        )
    if spec.splits.train.size == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")


# Aliases ---------------------------------------------------------------------------------


def get(dataset: str | None = None, /, **options: Any) -> DatasetSpec:
    """Alias for :func:`get_dataset`."""

    return get_dataset(dataset, **options)


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "TASK_TYPES",
    "available_datasets",
    "get",
    "get_dataset",
    "register_dataset",
]
