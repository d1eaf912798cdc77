"""
向导的异常体系。

正常操作不抛异常：setter 都是全函数，校验只返回 bool，不完整只体现为 can_proceed() == False。
异常只留给库边界上的误用：
  ValidationError  未知 case type 传给 schema 注册表
  BlockError       草稿没走完就 submit()
  WarningError     有软警告但没带 confirm=True

调用方（UI / 外层服务）用 to_dict() 拿到统一的错误结构：
{
    "type":    "validation_error" | "block" | "warning",
    "code":    "ORDER_INCOMPLETE",
    "message": "Order draft is not complete.",
    "detail":  { ... }  // 可选
}
"""


class BaseAppException(Exception):
    """所有向导异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'

    def __init__(self, message, code=None, detail=None):
        self.message = message
        if code is not None:
            self.code = code
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {
            'type': self.type,
            'code': self.code,
            'message': self.message,
        }
        if self.detail is not None:
            body['detail'] = self.detail
        return body


class ValidationError(BaseAppException):
    type = 'validation_error'
    code = 'VALIDATION_ERROR'


class BlockError(BaseAppException):
    """草稿状态不允许这个操作（例如第 1..8 步还有没完成的）。"""

    type = 'block'
    code = 'BUSINESS_BLOCK'


class WarningError(BaseAppException):
    """
    不是失败，是"暂停"。

    调用方展示 detail['warnings']（[{'field', 'code', 'message'}, ...]），
    用户确认后带 confirm=True 重新 submit()。
    """

    type = 'warning'
    code = 'CONFIRMATION_REQUIRED'
