'''
the conversion registry mapping raw command-line strings onto typed values.
'''
import math
import re
import struct
import types
import uuid
from collections.abc import Collection, Iterable, MutableSequence, Sequence
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Any, Callable, List, Optional, Union

from .errors import ConversionError, NoConverterError
from .types import ConvertType, DateTimeOffset, Float32, OptionKind, TargetType

UnionType = getattr(types, 'UnionType', None)

_INT32_MIN = -2**31
_INT32_MAX = 2**31 - 1

_TIMESPAN_PATTERN = re.compile(
    r'^(?P<sign>-)?(?:(?P<days>\d+)\.)?(?P<hours>\d+):(?P<minutes>\d+)'
    r'(?::(?P<seconds>\d+)(?:\.(?P<fraction>\d{1,7}))?)?$',
    re.ASCII
)
_DAYS_PATTERN = re.compile(r'^(?P<sign>-)?(?P<days>\d+)$', re.ASCII)
_INT32_PATTERN = re.compile(r'^[+-]?\d+$', re.ASCII)


def bool_type_fn(val: str) -> bool:
    '''
        Convert `true` or `false` (case-insensitive) to a boolean.
    '''
    text = val.strip().lower()
    if text == 'true':
        return True
    if text == 'false':
        return False

    raise ValueError(f'String was not recognized as a valid boolean: {val}')


def int32_type_fn(val: str) -> int:
    '''
        Convert a base-10 string to an integer within the signed 32-bit range.
    '''
    text = val.strip()
    if _INT32_PATTERN.match(text) is None:
        raise ValueError(f'Input string was not in a correct format: {val}')
    number = int(text, 10)
    if number < _INT32_MIN or number > _INT32_MAX:
        raise OverflowError(f'Value was either too large or too small: {val}')

    return number


def float32_type_fn(val: str) -> float:
    '''
        Convert a string to a float rounded to single precision.
    '''
    value = float(val)
    single = struct.unpack('f', struct.pack('f', value))[0]
    if math.isinf(single) and not math.isinf(value):
        raise OverflowError(f'Value was either too large or too small: {val}')

    return single


def _fromisoformat(val: str) -> datetime:
    text = val.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def datetime_type_fn(val: str) -> datetime:
    '''
        Convert an ISO 8601 string to a naive datetime.

        A value carrying an offset is converted to local time and the offset dropped.
    '''
    value = _fromisoformat(val)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)

    return value


def datetime_offset_type_fn(val: str) -> datetime:
    '''
        Convert an ISO 8601 string to an aware datetime.

        A value without an offset is taken as local time and receives the local offset.
    '''
    value = _fromisoformat(val)
    if value.tzinfo is None:
        value = value.astimezone()

    return value


def timedelta_type_fn(val: str) -> timedelta:
    '''
        Convert a time span string to a timedelta.

        Accepted forms are `[-]d` (a whole number of days) and
        `[-][d.]hh:mm[:ss[.fffffff]]`.

        Example:
        ```python
        timedelta_type_fn('1.02:03:04.5')  # timedelta(days=1, seconds=7384, microseconds=500000)
        timedelta_type_fn('-3')            # timedelta(days=-3)
        ```
    '''
    text = val.strip()
    match = _DAYS_PATTERN.match(text)
    if match is not None:
        days = timedelta(days=int(match.group('days')))
        return -days if match.group('sign') else days

    match = _TIMESPAN_PATTERN.match(text)
    if match is None:
        raise ValueError(f'String was not recognized as a valid TimeSpan: {val}')

    hours = int(match.group('hours'))
    minutes = int(match.group('minutes'))
    seconds = int(match.group('seconds') or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise OverflowError(f'The TimeSpan could not be parsed: {val}')

    fraction = match.group('fraction') or ''
    span = timedelta(
        days=int(match.group('days') or 0),
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        microseconds=int(fraction[:6].ljust(6, '0'))
    )

    return -span if match.group('sign') else span


_PARSERS = {
    ConvertType.Boolean: bool_type_fn,
    ConvertType.Int32: int32_type_fn,
    ConvertType.Double: float,
    ConvertType.Single: float32_type_fn,
    ConvertType.Uuid: uuid.UUID,
    ConvertType.DateTime: datetime_type_fn,
    ConvertType.DateTimeOffset: datetime_offset_type_fn,
    ConvertType.TimeSpan: timedelta_type_fn,
}

_DEFAULTS = {
    ConvertType.String: None,
    ConvertType.Boolean: False,
    ConvertType.Int32: 0,
    ConvertType.Double: 0.0,
    ConvertType.Single: 0.0,
    ConvertType.Uuid: uuid.UUID(int=0),
    ConvertType.DateTime: datetime.min,
    ConvertType.DateTimeOffset: datetime.min.replace(tzinfo=timezone.utc),
    ConvertType.TimeSpan: timedelta(0),
}

_HINTS = {
    str: ConvertType.String,
    bool: ConvertType.Boolean,
    int: ConvertType.Int32,
    float: ConvertType.Double,
    Float32: ConvertType.Single,
    uuid.UUID: ConvertType.Uuid,
    datetime: ConvertType.DateTime,
    DateTimeOffset: ConvertType.DateTimeOffset,
    timedelta: ConvertType.TimeSpan,
}

_SEQUENCE_ORIGINS = (
    list, List, Sequence, MutableSequence, Collection, Iterable
)


def _is_union(dtype) -> bool:
    origin_type = getattr(dtype, '__origin__', None)
    return origin_type is Union or (
        UnionType is not None and isinstance(dtype, UnionType)
    )


def _strip_optional(dtype):
    '''
        Split `Optional[X]` (or `X | None`) into `(X, True)`; other types yield `(dtype, False)`.
    '''
    if not _is_union(dtype):
        return dtype, False
    dtype_generics = [x for x in dtype.__args__ if x is not type(None)]
    if len(dtype_generics) != 1:
        raise NoConverterError(dtype)

    return dtype_generics[0], len(dtype_generics) != len(dtype.__args__)


def analysis_type(dtype) -> TargetType:
    '''
        Resolve a type annotation or a conversion tag into a `TargetType`.

        Parameters:
        - dtype: a `TargetType`, a `ConvertType`, or one of the supported annotations
            (`str`, `bool`, `int`, `float`, `Float32`, `uuid.UUID`, `datetime`,
            `DateTimeOffset`, `timedelta`), optionally wrapped in `Optional[...]`.

        Raises:
        - `NoConverterError`: if the type is not supported.
    '''
    if isinstance(dtype, TargetType):
        return dtype
    if isinstance(dtype, ConvertType):
        return TargetType(dtype)

    inner, nullable = _strip_optional(dtype)
    try:
        kind = _HINTS.get(inner)
    except TypeError:
        kind = None
    if kind is None:
        raise NoConverterError(dtype)

    return TargetType(kind, nullable)


def analysis_collection_type(dtype) -> TargetType:
    '''
        Resolve the element type of a multi-value annotation, e.g. `List[int]` to `integer`.

        A bare `list` (or `List`) holds strings. `Optional[List[X]]` is accepted and
        resolved as `List[X]`, because a multiple option always yields a list.
    '''
    if isinstance(dtype, (TargetType, ConvertType)):
        return analysis_type(dtype)

    dtype, _ = _strip_optional(dtype)
    origin_type = getattr(dtype, '__origin__', dtype)
    if origin_type not in _SEQUENCE_ORIGINS:
        raise NoConverterError(dtype)

    dtype_generics = getattr(dtype, '__args__', None) or (str, )
    if len(dtype_generics) != 1:
        raise NoConverterError(dtype)

    return analysis_type(dtype_generics[0])


def convert_type_fn(
    val: Optional[str], dtype: Callable, target: TargetType
) -> Any:
    '''
        Convert one raw value with the parse function `dtype`.

        A nullable target maps `None` and `''` to `None`; a non-nullable target maps a
        missing value to the zero value of the type. Parse failures are raised as
        `ConversionError` carrying the raw text and the target type.
    '''
    if val is None:
        return None if target.nullable else _DEFAULTS[target.kind]
    if target.nullable and val == '':
        return None
    try:
        return dtype(val)
    except (ValueError, TypeError, OverflowError) as e:
        raise ConversionError(val, target) from e


def nullable_str_fn(val: Optional[str]) -> Optional[str]:
    return val or None


def collection_type_fn(vals: Optional[List[str]], dtype: Callable) -> List:
    '''
        Convert every raw value independently, preserving their order.
    '''
    if vals is None:
        return []

    return [dtype(val) for val in vals]


def get_single_converter(
    dtype
) -> Optional[Callable[[Optional[str]], Any]]:
    '''
        Get the converter of a single-value option for the given type.

        Returns `None` for a non-nullable string, which is assigned without conversion.

        Raises:
        - `NoConverterError`: if the type is not supported.
    '''
    target = analysis_type(dtype)
    if target.kind is ConvertType.String:
        return nullable_str_fn if target.nullable else None

    return partial(convert_type_fn, dtype=_PARSERS[target.kind], target=target)


def get_multiple_converter(
    dtype
) -> Optional[Callable[[Optional[List[str]]], List]]:
    '''
        Get the converter of a multiple-value option for the given collection type.

        Returns `None` for a list of strings, which is assigned without conversion.

        Raises:
        - `NoConverterError`: if the type is not supported.
    '''
    element = analysis_collection_type(dtype)
    element_converter = get_single_converter(element)
    if element_converter is None:
        return None

    return partial(collection_type_fn, dtype=element_converter)


def is_assignable(dtype, kind: OptionKind) -> bool:
    '''
        Check whether the raw value of an option of `kind` can be assigned to `dtype`
        without a converter.

        Single options yield a string, multiple options a list of strings and flags a
        boolean. Unannotated (`None`) and `Any` targets accept every raw value.
    '''
    if dtype is None or dtype is Any:
        return True
    try:
        if kind is OptionKind.Multiple:
            element = analysis_collection_type(dtype)
            return element == TargetType(ConvertType.String)
        target = analysis_type(dtype)
    except NoConverterError:
        return False
    if kind is OptionKind.Flag:
        return target.kind is ConvertType.Boolean

    return target.kind is ConvertType.String
