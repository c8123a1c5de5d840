# -*- coding: utf-8 -*-
"""筛选状态查看 REST API。"""

from flask import Blueprint, current_app, g, jsonify, session

from utils.api_response import create_error_response, create_success_response
from utils.filter_state import DEFAULT_SESSION_KEY, get_filter_store
from utils.logging_setup import get_logger

logger = get_logger('filters_api')

filters_api_bp = Blueprint('filters_api', __name__)


@filters_api_bp.route('/api/filters', methods=['GET'])
def list_filters():
    """当前会话中所有页面的筛选条件（不含空页面）。"""
    try:
        all_filters = get_filter_store().get_global()
        data = {path: filters for path, filters in all_filters.items() if filters}
        return jsonify(create_success_response(data, {'total_paths': len(data)}))
    except Exception as e:
        logger.error('获取筛选条件失败: %s', str(e), exc_info=True)
        return jsonify(create_error_response('INTERNAL_ERROR', '获取筛选条件失败')), 500


@filters_api_bp.route('/api/filters/<path:page_path>', methods=['GET'])
def get_page_filters(page_path):
    """查看指定页面的筛选条件（只读）。"""
    try:
        store = get_filter_store(page_path)
        return jsonify(create_success_response({'path': store.path, 'filters': store.get()}))
    except Exception as e:
        logger.error('获取页面筛选条件失败 path=%s: %s', page_path, str(e), exc_info=True)
        return jsonify(create_error_response('INTERNAL_ERROR', '获取筛选条件失败')), 500


@filters_api_bp.route('/api/filters', methods=['DELETE'])
def clear_filters():
    """清除当前会话中的全部筛选条件。"""
    session_key = current_app.config.get('FILTER_SESSION_KEY', DEFAULT_SESSION_KEY)
    session.pop(session_key, None)
    g.pop('filter_store', None)
    logger.info('已清除会话筛选条件')
    return jsonify(create_success_response({'cleared': True}))
