"""
Pytest 配置和共享 fixtures
"""
import os

import pytest
from dotenv import load_dotenv

# 加载环境变量
load_dotenv()

# 设置测试环境变量
os.environ['FLASK_ENV'] = 'testing'
os.environ['TESTING'] = 'True'
os.environ['SECRET_KEY'] = 'test-secret-key'


class DictSessionStore:
    """以普通字典模拟 session 条目，记录写入次数。"""

    def __init__(self, initial=None, key='filters'):
        self.key = key
        self.data = {}
        if initial is not None:
            self.data[key] = initial
        self.writes = 0

    def get(self, default=None):
        return self.data.get(self.key, default)

    def set(self, value):
        self.writes += 1
        self.data[self.key] = value


@pytest.fixture(scope='session')
def app():
    """创建Flask应用实例（会话级别，整个测试会话共享一个实例）"""
    from app import create_app

    flask_app = create_app()
    flask_app.config['TESTING'] = True
    flask_app.config['SESSION_COOKIE_SECURE'] = False

    yield flask_app


@pytest.fixture(scope='function')
def client(app):
    """Flask测试客户端（每个测试独立的 cookie，即独立的 session）"""
    return app.test_client()


@pytest.fixture(scope='function')
def session_store():
    """空的模拟 session 存储"""
    return DictSessionStore()


@pytest.fixture(scope='function')
def make_session_store():
    """按初始内容构造模拟 session 存储"""
    return DictSessionStore


@pytest.fixture(scope='function')
def temp_log_dir(tmp_path, monkeypatch):
    """临时日志目录"""
    log_dir = tmp_path / 'log'
    monkeypatch.setenv('LOG_DIR', str(log_dir))
    return log_dir
