"""文章归档列表页路由。

列表页共享一组基础筛选（分页、排序），各视图再声明自己的筛选键。
"""

from typing import Any, Dict

from flask import Blueprint, jsonify

from utils.api_response import create_error_response, create_success_response
from utils.filter_state import FilterStore, get_filter_store, get_request_params
from utils.logging_setup import get_logger

logger = get_logger('archives')

archives_bp = Blueprint('archives', __name__)

BASE_LIST_FILTERS = {'page': '1', 'sort': 'date'}


def _track_list_filters(view_filters: Dict[str, Any]) -> FilterStore:
    """先声明基础筛选，再声明视图自己的筛选；同名键以先声明的默认值为准。"""
    store = get_filter_store()
    store.track(BASE_LIST_FILTERS)
    store.track(view_filters)

    action = get_request_params().get('filter_action')
    if action == 'reset':
        store.reset()
    elif action == 'clear':
        store.delete()
    return store


def _serialize_store(store: FilterStore) -> Dict[str, Any]:
    return {
        'path': store.path,
        'filters': store.get(),
        'changed': sorted(store.changed()),
    }


@archives_bp.route('/', methods=['GET', 'POST'])
def list_archives():
    """已发布文章列表。"""
    try:
        store = _track_list_filters({'status': 'published', 'q': '', 'sort': 'title'})
        logger.info('归档列表筛选条件：%s', store.get())
        return jsonify(create_success_response(_serialize_store(store)))
    except Exception as e:
        logger.error('处理归档列表筛选失败: %s', str(e), exc_info=True)
        return jsonify(create_error_response('INTERNAL_ERROR', '处理筛选条件失败')), 500


@archives_bp.route('/drafts', methods=['GET', 'POST'])
def list_drafts():
    """草稿列表，与已发布列表的筛选条件互不影响。"""
    try:
        store = _track_list_filters({'author': None})
        logger.info('草稿列表筛选条件：%s', store.get())
        return jsonify(create_success_response(_serialize_store(store)))
    except Exception as e:
        logger.error('处理草稿列表筛选失败: %s', str(e), exc_info=True)
        return jsonify(create_error_response('INTERNAL_ERROR', '处理筛选条件失败')), 500
