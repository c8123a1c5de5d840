"""统一的 JSON 响应结构。"""

from typing import Any, Dict, Optional


def create_success_response(data: Any = None, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """统一成功响应格式。"""
    return {'success': True, 'data': data, 'error': None, 'meta': meta or {}}


def create_error_response(code: str, message: str, *, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """统一失败响应格式。"""
    return {'success': False, 'data': None, 'error': {'code': code, 'message': message}, 'meta': meta or {}}
