# Copyright 2026-present Kensho Technologies, LLC.
"""Calibrated constants and page-size multiplier curves used to cost GraphQL queries.

The numbers in this module are not derived from first principles: they are fitted against the
charges observed from a real backend's rate limiter. Keep them here, as data, so that the estimator
can be recalibrated without touching the traversal or the per-field cost rules.
"""
from abc import ABCMeta, abstractmethod
import bisect
from dataclasses import dataclass, field
import math
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .exceptions import InvalidCostModelError


# (largest page size in the bucket, multiplier), sorted by page size.
DEFAULT_PAGE_SIZE_BUCKETS: Tuple[Tuple[int, int], ...] = (
    (2, 1),
    (4, 2),
    (7, 3),
    (12, 4),
    (20, 5),
    (39, 6),
    (59, 7),
    (79, 8),
    (99, 9),
    (149, 10),
    (249, 11),
)

# Beyond the table, the multiplier grows as DEFAULT_TAIL_OFFSET + floor(log2(page size)).
DEFAULT_TAIL_OFFSET = 3

# The page size assumed when a connection is requested without a usable page size argument.
DEFAULT_PAGE_SIZE = 1


def _is_integer(value: Any) -> bool:
    """Return True if the value is an int, and not a bool."""
    # bool is a subclass of int, but a flag is never a count.
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_name(name: str, value: Any) -> None:
    """Raise InvalidCostModelError unless the value is a non-empty string."""
    if not isinstance(value, str) or not value:
        raise InvalidCostModelError(f"{name} must be a non-empty string, got {value!r}.")


def normalize_page_size(requested_size: Any) -> int:
    """Return the page size to cost, defaulting conservatively for missing or malformed values."""
    # "first: true" is not a page size.
    if not _is_integer(requested_size):
        return DEFAULT_PAGE_SIZE
    if requested_size < 1:
        return DEFAULT_PAGE_SIZE
    return requested_size


class ConnectionMultiplier(metaclass=ABCMeta):
    """Maps a requested page size to the factor applied to a connection's per-item cost."""

    def get_multiplier(self, requested_size: Any) -> int:
        """Return the multiplier for the requested page size, which may be missing or malformed."""
        return self._multiplier_for_size(normalize_page_size(requested_size))

    @abstractmethod
    def _multiplier_for_size(self, size: int) -> int:
        """Return the multiplier for a page size that is known to be a positive integer."""
        raise NotImplementedError()

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable description of the curve."""
        raise NotImplementedError()


@dataclass(frozen=True)
class BucketedConnectionMultiplier(ConnectionMultiplier):
    """Step-table multiplier with a logarithmic tail beyond the largest tabulated page size."""

    buckets: Tuple[Tuple[int, int], ...] = DEFAULT_PAGE_SIZE_BUCKETS
    tail_offset: int = DEFAULT_TAIL_OFFSET

    def __post_init__(self) -> None:
        """Validate the bucket table and the tail offset."""
        if not _is_integer(self.tail_offset):
            raise InvalidCostModelError(
                f"The tail offset must be an integer, got {self.tail_offset!r}."
            )
        if not self.buckets:
            raise InvalidCostModelError("The page size bucket table must not be empty.")

        previous_bound = 0
        previous_multiplier = 0
        for bound, multiplier in self.buckets:
            if not _is_integer(bound) or not _is_integer(multiplier):
                raise InvalidCostModelError(
                    f"Page size buckets must be pairs of integers, got {(bound, multiplier)!r}."
                )
            if bound <= previous_bound:
                raise InvalidCostModelError(
                    f"Page size bucket bounds must be positive and strictly increasing, but "
                    f"{bound} follows {previous_bound} in {self.buckets}."
                )
            if multiplier < 1 or multiplier < previous_multiplier:
                raise InvalidCostModelError(
                    f"Page size bucket multipliers must be positive and non-decreasing, but "
                    f"{multiplier} follows {previous_multiplier} in {self.buckets}."
                )
            previous_bound = bound
            previous_multiplier = multiplier

    def _multiplier_for_size(self, size: int) -> int:
        """Look the size up in the table, or fall back to the tail formula above it."""
        bounds = [bound for bound, _ in self.buckets]
        bucket_index = bisect.bisect_left(bounds, size)
        if bucket_index < len(self.buckets):
            return self.buckets[bucket_index][1]

        # int.bit_length() - 1 is floor(log2(size)) without floating point error.
        # The tail is clamped to the top of the table: 3 + floor(log2(250)) is 10,
        # which would otherwise dip below the multiplier of the last bucket.
        tail_multiplier = self.tail_offset + size.bit_length() - 1
        return max(self.buckets[-1][1], tail_multiplier)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable description of the curve."""
        return {
            "kind": "buckets",
            "buckets": [[bound, multiplier] for bound, multiplier in self.buckets],
            "tail_offset": self.tail_offset,
        }


@dataclass(frozen=True)
class LogCalibratedConnectionMultiplier(ConnectionMultiplier):
    """Purely logarithmic multiplier, pinned so that calibration_size maps to its multiplier."""

    calibration_size: int = 250
    calibration_multiplier: int = 11

    def __post_init__(self) -> None:
        """Validate the calibration point."""
        if not _is_integer(self.calibration_size) or not _is_integer(self.calibration_multiplier):
            raise InvalidCostModelError(
                f"The calibration point must be a pair of integers, got "
                f"{(self.calibration_size, self.calibration_multiplier)!r}."
            )
        if self.calibration_size < 2:
            raise InvalidCostModelError(
                f"The calibration page size must be at least 2, got {self.calibration_size}."
            )
        if self.calibration_multiplier < 1:
            raise InvalidCostModelError(
                f"The calibration multiplier must be positive, got {self.calibration_multiplier}."
            )

    def _multiplier_for_size(self, size: int) -> int:
        """Return 1 + floor(k * ln(size)), with k chosen to hit the calibration point exactly."""
        scale = (self.calibration_multiplier - 1) / math.log(self.calibration_size)
        # Round away float noise, so that the calibration size itself lands on its multiplier.
        return 1 + math.floor(round(scale * math.log(size), 9))

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable description of the curve."""
        return {
            "kind": "log",
            "calibration_size": self.calibration_size,
            "calibration_multiplier": self.calibration_multiplier,
        }


@dataclass(frozen=True)
class CostModel:
    """All the constants that define how much each kind of field costs."""

    # Flat cost of each top-level mutation field.
    mutation_cost: int = 10

    # Whether mutation fields are charged their selection's cost on top of the flat cost.
    mutation_includes_child_cost: bool = False

    # Access charge of a non-connection, object-typed field, added to its children's cost.
    object_cost: int = 1

    # Minimum cost of an interface or union typed field. Zero disables the floor.
    abstract_floor_cost: int = 1

    # What a selected page info object adds to its connection's raw child cost,
    # and is removed again before multiplying the items cost by the page size multiplier.
    page_info_base_cost: int = 1

    # Flat charge for delivering pagination metadata, whatever the page size.
    page_info_metadata_cost: int = 2

    page_info_field_name: str = "pageInfo"

    # Object types whose name ends with this suffix are paginated connections.
    connection_type_suffix: str = "Connection"

    # Arguments whose largest value is the page size of a connection field.
    page_size_argument_names: Tuple[str, ...] = ("first", "last")

    multiplier: ConnectionMultiplier = field(default_factory=BucketedConnectionMultiplier)

    def __post_init__(self) -> None:
        """Validate the constants."""
        for constant_name in (
            "mutation_cost",
            "object_cost",
            "abstract_floor_cost",
            "page_info_base_cost",
            "page_info_metadata_cost",
        ):
            value = getattr(self, constant_name)
            if not _is_integer(value) or value < 0:
                raise InvalidCostModelError(
                    f"Cost model constant {constant_name} must be a non-negative integer, "
                    f"got {value!r}."
                )
        if not isinstance(self.mutation_includes_child_cost, bool):
            raise InvalidCostModelError(
                f"mutation_includes_child_cost must be a boolean, "
                f"got {self.mutation_includes_child_cost!r}."
            )
        _validate_name("page_info_field_name", self.page_info_field_name)
        _validate_name("connection_type_suffix", self.connection_type_suffix)
        if not isinstance(self.page_size_argument_names, tuple):
            raise InvalidCostModelError(
                f"page_size_argument_names must be a tuple of argument names, "
                f"got {self.page_size_argument_names!r}."
            )
        for argument_name in self.page_size_argument_names:
            _validate_name("Each page size argument name", argument_name)
        if not isinstance(self.multiplier, ConnectionMultiplier):
            raise InvalidCostModelError(
                f"Expected a ConnectionMultiplier, got {type(self.multiplier).__name__}."
            )

    def get_connection_multiplier(self, requested_size: Any) -> int:
        """Return the page size multiplier for a connection field."""
        return self.multiplier.get_multiplier(requested_size)

    def get_requested_page_size(self, arguments: Mapping[str, Any]) -> Optional[int]:
        """Return the largest usable page size argument among the given arguments, if any."""
        page_sizes = [
            arguments[argument_name]
            for argument_name in self.page_size_argument_names
            if arguments.get(argument_name) is not None
        ]
        usable_page_sizes = [
            page_size
            for page_size in page_sizes
            if isinstance(page_size, int) and not isinstance(page_size, bool) and page_size >= 1
        ]
        if not usable_page_sizes:
            return None
        return max(usable_page_sizes)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable description of the model, the inverse of from_dict."""
        return {
            "mutation_cost": self.mutation_cost,
            "mutation_includes_child_cost": self.mutation_includes_child_cost,
            "object_cost": self.object_cost,
            "abstract_floor_cost": self.abstract_floor_cost,
            "page_info_base_cost": self.page_info_base_cost,
            "page_info_metadata_cost": self.page_info_metadata_cost,
            "page_info_field_name": self.page_info_field_name,
            "connection_type_suffix": self.connection_type_suffix,
            "page_size_argument_names": list(self.page_size_argument_names),
            "multiplier": self.multiplier.to_dict(),
        }


DEFAULT_COST_MODEL = CostModel()

# The earlier revision: mutations also pay for their selection, interface and union fields have no
# floor, and the page size curve is logarithmic throughout.
LOG_CALIBRATED_COST_MODEL = CostModel(
    mutation_includes_child_cost=True,
    abstract_floor_cost=0,
    multiplier=LogCalibratedConnectionMultiplier(),
)


def _multiplier_from_dict(multiplier_data: Mapping[str, Any]) -> ConnectionMultiplier:
    """Build the multiplier curve described by the given mapping."""
    if not isinstance(multiplier_data, Mapping):
        raise InvalidCostModelError(
            f"The multiplier must be described by a JSON object, got {multiplier_data!r}."
        )
    multiplier_data = dict(multiplier_data)
    kind = multiplier_data.pop("kind", "buckets")
    try:
        if kind == "buckets":
            buckets: Sequence[Sequence[int]] = multiplier_data.pop(
                "buckets", DEFAULT_PAGE_SIZE_BUCKETS
            )
            bucket_table = tuple((bound, value) for bound, value in buckets)
            return BucketedConnectionMultiplier(buckets=bucket_table, **multiplier_data)
        elif kind == "log":
            return LogCalibratedConnectionMultiplier(**multiplier_data)
    except (TypeError, ValueError) as e:
        raise InvalidCostModelError(f"Invalid multiplier configuration: {e}") from e

    raise InvalidCostModelError(
        f'Unknown multiplier kind "{kind}", expected one of "buckets" or "log".'
    )


def cost_model_from_dict(cost_model_data: Mapping[str, Any]) -> CostModel:
    """Build a CostModel from JSON-like data, using defaults for any missing constants.

    Args:
        cost_model_data: mapping of CostModel attribute names to values. The "multiplier" value, if
                         present, is a mapping with a "kind" key of either "buckets" (with optional
                         "buckets" as a list of [max_page_size, multiplier] pairs and optional
                         "tail_offset") or "log" (with optional "calibration_size" and
                         "calibration_multiplier").

    Returns:
        CostModel described by the data

    Raises:
        InvalidCostModelError if the data names unknown attributes or describes an invalid model
    """
    if not isinstance(cost_model_data, Mapping):
        raise InvalidCostModelError(
            f"A cost model must be described by a JSON object, got {cost_model_data!r}."
        )
    cost_model_kwargs = dict(cost_model_data)
    if "multiplier" in cost_model_kwargs:
        cost_model_kwargs["multiplier"] = _multiplier_from_dict(cost_model_kwargs["multiplier"])
    if "page_size_argument_names" in cost_model_kwargs:
        argument_names = cost_model_kwargs["page_size_argument_names"]
        # A bare string is iterable too, and would become a tuple of its characters.
        if not isinstance(argument_names, (list, tuple)):
            raise InvalidCostModelError(
                f"page_size_argument_names must be a list of argument names, "
                f"got {argument_names!r}."
            )
        cost_model_kwargs["page_size_argument_names"] = tuple(argument_names)

    try:
        return CostModel(**cost_model_kwargs)
    except TypeError as e:
        raise InvalidCostModelError(f"Invalid cost model configuration: {e}") from e
