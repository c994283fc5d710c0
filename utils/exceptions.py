from typing import Any, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    data: Optional[Any]  # 附加数据

    def __init__(self, message: str = "业务异常", code: int = 400, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(description=message)


class ValidationError(BizError):
    """缺少必填字段或字段取值非法。"""

    def __init__(self, message: str = "参数校验失败", data: Any = None):
        super().__init__(message, code=400, data=data)


class DuplicateIdentityError(BizError):
    """用例 ID 或用户名重复，单独区分以便调用方提示“已存在”。"""

    def __init__(self, message: str = "记录已存在", data: Any = None):
        super().__init__(message, code=409, data=data)


class DuplicateIdError(DuplicateIdentityError):
    pass


class DuplicateNameError(DuplicateIdentityError):
    pass


class NotFoundError(BizError):
    def __init__(self, message: str = "记录不存在", data: Any = None):
        super().__init__(message, code=404, data=data)


class ReferentialIntegrityError(BizError):
    """结果引用了不存在的用例或用户。"""

    def __init__(self, message: str = "关联记录不存在", data: Any = None):
        super().__init__(message, code=400, data=data)


class AuthError(BizError):
    def __init__(self, message: str = "需要登录", data: Any = None):
        super().__init__(message, code=401, data=data)


class RateLimitedError(BizError):
    def __init__(self, message: str = "尝试过多，请稍后重试", data: Any = None):
        super().__init__(message, code=429, data=data)
