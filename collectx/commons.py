from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from enum import Enum
from numbers import Number
from typing import Any, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field


# region 可转换为数组的对象
class Arrayable(ABC):
    """
    可以像数组一样按键访问,并能导出为有序字典的对象
    """

    @abstractmethod
    def all(self) -> dict:
        pass

    @abstractmethod
    def has(self, key, *keys) -> bool:
        pass

    @abstractmethod
    def get(self, index):
        pass


# endregion


# region 值的种类
class ValueKind(str, Enum):
    """
    解析点路径时对值的分类
    """

    SCALAR = "scalar"
    """标量,包括None、数字、字符串和字节串"""
    SEQUENCE = "sequence"
    """列表、元组等序列"""
    MAPPING = "mapping"
    """字典以及集合对象"""
    OPAQUE = "opaque"
    """其他对象,只能通过属性访问"""

    @classmethod
    def of(cls, value: Any) -> "ValueKind":
        if value is None or isinstance(value, (Number, str, bytes, bytearray)):
            return cls.SCALAR
        if isinstance(value, (Arrayable, Mapping)):
            return cls.MAPPING
        if isinstance(value, Sequence):
            return cls.SEQUENCE
        return cls.OPAQUE

    @property
    def is_accessible(self) -> bool:
        """
        是否支持按键访问
        """
        return self in (ValueKind.SEQUENCE, ValueKind.MAPPING)


# endregion


class PathOptions(BaseModel):
    """
    点路径语法
    """
    separator: str = Field(default=".")
    """ 路径分隔符 """
    wildcard: str = Field(default="*")
    """ 通配符 """


DEFAULT_PATH_OPTIONS = PathOptions()


# region 数组工具
class Arr(object):
    """
    数组工具
    """

    @classmethod
    def accessible(cls, value: Any) -> bool:
        """
        判断值是否支持按键访问
        """
        return ValueKind.of(value).is_accessible

    @classmethod
    def lookup(cls, target: Any, key: Any) -> tuple[bool, Any]:
        """
        在可访问的目标中查找键,纯数字的字符串键同时会尝试对应的整数键

        Args:
            target: 字典、序列或集合对象
            key: 键

        Returns:
            tuple[bool, Any]: 是否找到, 实际命中的键
        """
        candidates = [key]
        if isinstance(key, str) and key.isascii() and key.isdigit():
            candidates.append(int(key))

        for candidate in candidates:
            if isinstance(target, Arrayable):
                if target.has(candidate):
                    return True, candidate
            elif isinstance(target, Mapping):
                if candidate in target:
                    return True, candidate
            elif isinstance(candidate, int) and not isinstance(candidate, bool):
                if 0 <= candidate < len(target):
                    return True, candidate
        return False, None

    @classmethod
    def exists(cls, target: Any, key: Any) -> bool:
        """
        判断目标中是否存在指定的键
        """
        return cls.lookup(target, key)[0]

    @classmethod
    def items_of(cls, target: Any) -> list:
        """
        按顺序取出目标中的所有值
        """
        if isinstance(target, Arrayable):
            return list(target.all().values())
        if isinstance(target, Mapping):
            return list(target.values())
        return list(target)

    @classmethod
    def pluck(cls, target: Any, path: Union[str, list], options: PathOptions = DEFAULT_PATH_OPTIONS) -> list:
        """
        从目标的每个元素中取出路径对应的值

        Args:
            target: 字典、序列或集合对象
            path: 路径
            options: 点路径语法

        Returns:
            list: 取出的值,与元素一一对应
        """
        return [resolve_path(item, path, options=options) for item in cls.items_of(target)]

    @classmethod
    def collapse(cls, values: list) -> list:
        """
        把由数组组成的数组展开一层,非数组的元素会被丢弃
        """
        results = []
        for value in values:
            if cls.accessible(value):
                results.extend(cls.items_of(value))
        return results


# endregion


def resolve_path(target: Any, key: Union[str, list, tuple, None], default: Any = None,
                 options: Optional[PathOptions] = None) -> Any:
    """
    按点路径从嵌套的数据中取值,例如`a.b.c`或`users.*.name`

    Args:
        target: 要取值的数据,可以是字典、序列、集合对象或普通对象
        key: 点路径字符串,或已经拆分好的路径片段列表.为None时直接返回target
        default: 路径无法解析时返回的默认值
        options: 点路径语法,默认使用`.`分隔,`*`作为通配符

    Returns:
        Any: 路径对应的值
    """
    if key is None:
        return target
    options = options or DEFAULT_PATH_OPTIONS
    segments = list(key) if isinstance(key, (list, tuple)) else str(key).split(options.separator)

    while segments:
        segment = segments.pop(0)
        kind = ValueKind.of(target)

        if segment == options.wildcard:
            if not kind.is_accessible:
                logger.debug(f"通配符无法应用于{kind.value}类型的值,返回默认值")
                return default
            result = Arr.pluck(target, segments, options)
            return Arr.collapse(result) if options.wildcard in segments else result

        if kind.is_accessible:
            found, actual_key = Arr.lookup(target, segment)
            if found:
                target = target.get(actual_key) if isinstance(target, Arrayable) else target[actual_key]
                continue
        if kind != ValueKind.SCALAR and isinstance(segment, str):
            attribute = getattr(target, segment, None)
            # 字典、序列上的方法(keys、count等)不算字段
            if attribute is not None and (kind == ValueKind.OPAQUE or not callable(attribute)):
                target = attribute
                continue

        logger.debug(f"无法解析路径片段[{segment}],返回默认值")
        return default

    return target
