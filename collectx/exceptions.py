from typing import Any, Optional, ClassVar


def _calculate_exception_code(message: str) -> int:
    """
    计算异常代码。
    将消息字符串的每个字符的ASCII码相加，然后取模1000000以确保结果在合理范围内。
    """
    return sum(ord(char) for char in message) % 1000000


class BusinessException(Exception):

    def __init__(self, code: int, message: Optional[str] = None, reference_url: Optional[str] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message)
        self.code = code
        """错误代码"""
        self.message = message
        """错误信息"""
        self.reference_url = reference_url
        """参考链接"""
        self.cause = cause
        """原因"""

    def __str__(self):
        return f"错误代码: {self.code} \n 详情: {self.message} \n 参考链接: {self.reference_url}"


class CollectionException(BusinessException):
    """
    集合操作相关异常的基类
    """


class KeyNotFoundException(CollectionException, KeyError):
    KEY_NOT_FOUND_CODE: ClassVar[int] = _calculate_exception_code("KeyNotFoundException")

    def __init__(self, code: int, message: Optional[str] = None, key: Any = None):
        super().__init__(code=code, message=message)
        self.key = key
        """不存在的键"""

    @classmethod
    def key_not_found(cls, key: Any):
        return cls(code=cls.KEY_NOT_FOUND_CODE,
                   message=f"集合中不存在键[{key!r}]",
                   key=key)


class InvalidArgumentException(CollectionException, ValueError):
    INVALID_ARGUMENT_CODE: ClassVar[int] = _calculate_exception_code("InvalidArgumentException")

    @classmethod
    def invalid_step(cls, step: Any):
        return cls(code=cls.INVALID_ARGUMENT_CODE,
                   message=f"步长必须是正整数,实际为[{step!r}]")
