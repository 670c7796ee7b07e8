"""客户端异常"""

from typing import Any


class ApiRequestError(Exception):
    """HTTP 错误：状态码 + 解析后的响应体"""

    def __init__(self, status: int, status_text: str, data: Any = None) -> None:
        self.status = status
        self.status_text = status_text
        self.data = data
        super().__init__(f"API Error {status}: {status_text}")

    @property
    def message(self) -> str:
        """服务端返回的 message，没有则用状态文本"""
        if isinstance(self.data, dict) and self.data.get("message"):
            return str(self.data["message"])
        return self.status_text
