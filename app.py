import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from routes.archives import archives_bp
from routes.filters_api import filters_api_bp
from utils.api_response import create_error_response
from utils.filter_state import DEFAULT_SESSION_KEY
from utils.logging_setup import init_logging


def create_app() -> Flask:
    """Flask 应用工厂：加载配置、初始化日志、注册蓝图。"""
    load_dotenv()

    init_logging()

    flask_app = Flask(__name__)

    flask_app.config['SECRET_KEY'] = os.getenv('SECRET_KEY') or os.getenv('FLASK_SECRET_KEY', 'dev-secret-key')
    flask_app.config['FILTER_SESSION_KEY'] = os.getenv('FILTER_SESSION_KEY', DEFAULT_SESSION_KEY)
    lifetime = int(os.getenv('PERMANENT_SESSION_LIFETIME', '36000'))
    flask_app.permanent_session_lifetime = timedelta(seconds=lifetime)

    # Session 安全配置
    is_production = os.getenv('FLASK_ENV') == 'production'
    flask_app.config.update(
        SESSION_COOKIE_SECURE=is_production,  # 生产环境强制 HTTPS
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
    )

    flask_app.register_blueprint(archives_bp, url_prefix='/archives')
    flask_app.register_blueprint(filters_api_bp)

    @flask_app.errorhandler(404)
    def handle_404_error(_error):
        """处理404页面未找到错误"""
        flask_app.logger.warning("404页面未找到: %s", request.url)
        return jsonify(create_error_response('NOT_FOUND', '页面不存在')), 404

    @flask_app.errorhandler(500)
    def handle_500_error(error):
        """处理500内部服务器错误"""
        flask_app.logger.error("500内部服务器错误: %s", str(error), exc_info=True)
        flask_app.logger.error("请求URL: %s", request.url)
        return jsonify(create_error_response('INTERNAL_ERROR', '服务器内部错误')), 500

    flask_app.logger.info('应用初始化完成，筛选状态 session 键：%s', flask_app.config['FILTER_SESSION_KEY'])
    return flask_app


def run_dev() -> None:
    """开发环境启动入口。

    仅用于本地调试，不用于生产环境。
    """
    app = create_app()
    port = int(os.getenv('FLASK_APP_PORT', '5080'))
    is_debug = os.getenv('LOG_LEVEL', 'DEBUG') == 'DEBUG'
    host_ip = "0.0.0.0" if is_debug else "127.0.0.1"

    app.logger.info('以开发模式启动，监听端口：%s，IP地址：%s', port, host_ip)

    app.run(host=host_ip, port=port, debug=is_debug, use_reloader=is_debug)


if __name__ == '__main__':
    run_dev()
