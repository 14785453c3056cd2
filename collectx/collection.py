import json
import re
from collections.abc import Mapping
from functools import cmp_to_key
from typing import Any, Callable, ClassVar, Generic, Iterable, Iterator, Optional, TypeVar, Union

from loguru import logger
from pydantic import BaseModel

from collectx.commons import Arrayable, PathOptions, resolve_path
from collectx.exceptions import InvalidArgumentException, KeyNotFoundException

T = TypeVar("T", bound="Any")
U = TypeVar("U")

INTEGER_KEY_PATTERN = re.compile(r"0|-?[1-9][0-9]*", re.ASCII)


class Collection(Arrayable, Generic[T]):
    """
    表示一个有序的、可变的集合

    集合内部是一个保持插入顺序的字典,键可以是整数或字符串.
    不指定键追加元素时,会使用下一个未用过的整数作为键(删除元素不会让这个计数回退).

    `map`、`filter`、`sort`、`values`、`nth`会返回重新编号(0..n-1)的新集合,
    `slice`和`take`返回的新集合则保留原来的键.所有变换都不会修改当前集合,
    并且通过`new_instance`创建新集合,所以子类调用变换方法时得到的仍然是子类.

    Example:
        ```python
        users = Collection([{"name": "a", "age": 18}, {"name": "b", "age": 20}])
        users.filter(lambda u: u["age"] > 18).sum("age")  # 20
        ```
    """

    path_options: ClassVar[PathOptions] = PathOptions()
    """ `data_get`和`sum`使用的点路径语法 """

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._list: dict[Union[int, str], T] = {}
        self._next_index = 0
        if items is not None:
            self.collect(items)

    def new_instance(self) -> 'Collection[T]':
        """
        创建一个与当前集合类型相同的空集合,子类的构造函数需要参数时应重写此方法
        """
        return type(self)()

    @staticmethod
    def _normalize_key(key):
        """
        与PHP数组一致,形如"5"、"-3"的十进制整数字符串会被当作整数键,"05"、"1.0"等则保持字符串
        """
        if isinstance(key, str) and INTEGER_KEY_PATTERN.fullmatch(key):
            return int(key)
        return key

    def _from_entries(self, entries: Iterable[tuple[Union[int, str], T]]) -> 'Collection[T]':
        collection = self.new_instance()
        for key, value in entries:
            collection[key] = value
        return collection

    # region 构造与批量插入
    def collect(self, items: Iterable[T]) -> 'Collection[T]':
        """
        依次追加多个元素,元素原有的键会被丢弃

        Args:
            items: 要追加的元素,可以是任意可迭代对象、字典或集合

        Returns:
            Collection[T]: 当前集合
        """
        if isinstance(items, Collection):
            items = items.all().values()
        elif isinstance(items, Mapping):
            items = items.values()
        for item in items:
            self.add(item)
        return self

    # endregion

    # region 单个元素的增删查
    def add(self, item: T) -> 'Collection[T]':
        self[None] = item
        return self

    def push(self, item: T) -> 'Collection[T]':
        self[None] = item
        return self

    def remove(self, key) -> 'Collection[T]':
        """
        删除指定键的元素,键不存在时什么也不做
        """
        del self[key]
        return self

    def get(self, index):
        """
        获取指定键的元素.注意这里按实际存储的键查找,而不是按位置

        Raises:
            KeyNotFoundException: 键不存在
        """
        index = self._normalize_key(index)
        if index not in self._list:
            logger.debug(f"{type(self).__name__}中不存在键[{index!r}]")
            raise KeyNotFoundException.key_not_found(index)
        return self._list[index]

    # endregion

    # region 整体访问
    def all(self) -> dict:
        return dict(self._list)

    def keys(self) -> list:
        return list(self._list.keys())

    def items(self) -> list[tuple[Union[int, str], T]]:
        return list(self._list.items())

    def is_empty(self) -> bool:
        return not self._list

    def is_not_empty(self) -> bool:
        return not self.is_empty()

    def count(self) -> int:
        return len(self._list)

    def has(self, key, *keys) -> bool:
        """
        判断给定的键是否全部存在

        Args:
            key: 键,或由多个键组成的列表
            keys: 其他的键

        Returns:
            bool: 全部存在时返回True
        """
        keys = key if isinstance(key, (list, tuple)) else (key, *keys)
        return all(self._normalize_key(k) in self._list for k in keys)

    # endregion

    # region 变换
    def map(self, func: Callable[[T], U]) -> 'Collection[U]':
        """
        对集合中的每个元素应用一个函数，并返回一个新的集合
        Args:
            func: 要应用的函数
        Returns:
                Collection[U]: 应用函数后的新集合
        """
        return self.new_instance().collect(map(func, self._list.values()))

    def filter(self, func: Optional[Callable[[T], bool]] = None) -> 'Collection[T]':
        """
        保留使func返回真值的元素,func为空时保留本身为真值的元素
        """
        return self.new_instance().collect(filter(func, self._list.values()))

    def sort(self, func: Optional[Callable[[T, T], int]] = None) -> 'Collection[T]':
        """
        排序并返回新的集合

        Args:
            func: 比较函数,返回负数表示a排在b之前.为空时按元素本身升序排列

        Returns:
            Collection[T]: 排序后重新编号的新集合
        """
        values = list(self._list.values())
        if func:
            values.sort(key=cmp_to_key(func))
        else:
            values.sort()
        return self.new_instance().collect(values)

    def each(self, callback: Callable[[T, Any], Any]) -> 'Collection[T]':
        """
        依次以(元素, 键)调用callback,callback返回假值时停止遍历
        """
        for key, item in self.items():
            if not callback(item, key):
                break
        return self

    def slice(self, offset: int, length: Optional[int] = None) -> 'Collection[T]':
        """
        按位置截取一段连续的元素,保留原来的键

        Args:
            offset: 起始位置,负数表示从末尾倒数
            length: 截取的数量,为空时截取到末尾,负数表示在距末尾length个元素处停止

        Returns:
            Collection[T]: 截取得到的新集合
        """
        entries = self.items()
        size = len(entries)
        start = offset if offset >= 0 else max(size + offset, 0)
        if length is None:
            end = size
        elif length < 0:
            end = size + length
        else:
            end = start + length
        return self._from_entries(entries[start:end])

    def reduce(self, func: Callable[[Any, T], Any], initial: Any = None) -> Any:
        result = initial
        for item in self._list.values():
            result = func(result, item)
        return result

    def take(self, limit: int) -> 'Collection[T]':
        """
        取前limit个元素,limit为负数时取最后abs(limit)个元素
        """
        if limit < 0:
            return self.slice(limit, abs(limit))
        return self.slice(0, limit)

    def values(self) -> 'Collection[T]':
        return self.new_instance().collect(self._list.values())

    def nth(self, step: int, offset: int = 0) -> 'Collection[T]':
        """
        每隔step个位置取一个元素

        Args:
            step: 步长,必须大于0
            offset: 位置对步长取模后需要等于的值

        Raises:
            InvalidArgumentException: 步长小于等于0
        """
        if step <= 0:
            raise InvalidArgumentException.invalid_step(step)
        return self.new_instance().collect(
            item for position, item in enumerate(self._list.values()) if position % step == offset
        )

    def when(self, value: Any, callback: Callable, default: Optional[Callable] = None):
        """
        value为真值时返回callback(self, value)的结果,否则返回default(self, value)的结果,
        没有default时返回当前集合
        """
        if value:
            return callback(self, value)
        elif default:
            return default(self, value)
        return self

    def sum(self, callback: Union[str, list, Callable[[T], Any], None] = None):
        """
        求和

        Args:
            callback: 为空时直接对元素求和;为函数时对函数的返回值求和;
                为字符串或列表时把它当作点路径,对每个元素中路径对应的值求和

        Returns:
            元素的和
        """
        if callback is None:
            return sum(self._list.values())

        callback = self._value_retriever(callback)
        return self.reduce(lambda result, item: result + self._numeric_or_zero(callback(item)), 0)

    @staticmethod
    def _numeric_or_zero(value):
        return 0 if value is None else value

    def _value_retriever(self, value) -> Callable[[T], Any]:
        if self._use_as_callable(value):
            return value
        return lambda item: self.data_get(item, value)

    @staticmethod
    def _use_as_callable(value) -> bool:
        return not isinstance(value, str) and callable(value)

    def data_get(self, target: Any, key: Union[str, list, None], default: Any = None) -> Any:
        """
        按点路径从target中取值,语法由`path_options`决定
        """
        return resolve_path(target, key, default, self.path_options)

    # endregion

    # region 序列化
    def json_serialize(self) -> Union[list, dict]:
        """
        转换为可以直接序列化为json的数据.键恰好是0..n-1时返回列表,否则返回字典
        """
        data = {key: self._to_plain(value) for key, value in self._list.items()}
        if list(data.keys()) == list(range(len(data))):
            return list(data.values())
        return data

    @classmethod
    def _to_plain(cls, value: Any) -> Any:
        if isinstance(value, Collection):
            return value.json_serialize()
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, Mapping):
            return {k: cls._to_plain(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [cls._to_plain(v) for v in value]
        return value

    def to_json(self, **kwargs) -> str:
        kwargs.setdefault("ensure_ascii", False)
        return json.dumps(self.json_serialize(), **kwargs)

    # endregion

    # region 容器协议
    def __iter__(self) -> Iterator[T]:
        return iter(list(self._list.values()))

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key) -> bool:
        """
        判断键(而不是元素)是否存在
        """
        return self._normalize_key(key) in self._list

    def __getitem__(self, key) -> T:
        return self.get(key)

    def __setitem__(self, key, value: T):
        if key is None:
            key = self._next_index
        else:
            key = self._normalize_key(key)
        self._list[key] = value
        if isinstance(key, int) and key >= self._next_index:
            self._next_index = key + 1

    def __delitem__(self, key):
        self._list.pop(self._normalize_key(key), None)

    def __repr__(self):
        return f"{type(self).__name__}({self._list!r})"

    # endregion
