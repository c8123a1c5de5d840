"""筛选条件持久化工具。

使用 Flask session 记录每个页面的筛选参数，离开页面再回来时自动恢复上次的筛选条件。

约定：
- session 中只有一个条目（默认键 'filters'），结构为 {path: {name: value}}
- path 由当前请求的 endpoint 推导，如 'archives/list_archives'
- 请求参数优先；请求未携带时保留 session 中的旧值；两者都没有时使用默认值
- 默认值按首次声明为准，便于基础视图与具体视图分层声明
- 每次修改都立即整体写回 session，同一用户的并发请求互相覆盖（不做加锁）
"""

from typing import Any, Dict, Iterable, Mapping, Optional, Set, Union

from flask import current_app, g, request, session

from utils.logging_setup import get_logger

logger = get_logger('filter_state')

DEFAULT_SESSION_KEY = 'filters'


class FilterStoreReadOnlyError(RuntimeError):
    """对只读筛选存储（显式指定 path）执行修改操作时抛出。"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f'筛选存储为只读：{path}')


def get_request_params() -> Dict[str, str]:
    """合并查询参数与表单参数，同名时表单优先；多值参数只取第一个。"""
    params = request.args.to_dict()
    params.update(request.form.to_dict())
    return params


def get_current_path() -> str:
    """由当前 endpoint 推导页面路径（blueprint/view，嵌套蓝图为 directory/controller/action）。"""
    if request.endpoint:
        return request.endpoint.replace('.', '/')
    return request.path.strip('/')


class FlaskSessionStore:
    """以单个 session 条目保存全部筛选状态。"""

    def __init__(self, key: str = DEFAULT_SESSION_KEY):
        self.key = key

    def get(self, default=None):
        return session.get(self.key, default)

    def set(self, value) -> None:
        # 使用 PERMANENT_SESSION_LIFETIME 作为有效期，而不是随浏览器关闭失效
        session.permanent = True
        session[self.key] = value
        session.modified = True


def _as_names(names: Union[str, Iterable[str]]) -> list:
    if isinstance(names, str):
        return [names]
    return list(names)


class FilterStore:
    """单个页面路径的筛选状态。

    合并三个来源：本次请求参数、session 中上次保存的值、调用方声明的默认值。
    通过 get/set/delete/reset 读写，也支持属性访问：
    ``store.page``、``store.page = '2'``、``del store.page``、``'page' in store``。
    与方法或属性同名的键（如 path、changed）只能用 get()/set()/delete() 读写。
    """

    def __init__(self, session_store, params: Optional[Mapping[str, Any]] = None, path: str = '', *, read_only: bool = False):
        object.__setattr__(self, '_session_store', session_store)
        object.__setattr__(self, '_params', dict(params or {}))
        object.__setattr__(self, '_path', path)
        object.__setattr__(self, '_read_only', read_only)
        object.__setattr__(self, '_defaults', {})
        object.__setattr__(self, '_changed', {})

        stored = session_store.get({}) or {}
        # 逐层复制，避免与 session 中的对象互相引用
        filters = {key: dict(value) for key, value in stored.items() if isinstance(value, Mapping)}
        filters.setdefault(path, {})
        object.__setattr__(self, '_filters', filters)
        self._changed.setdefault(path, set())

    @property
    def path(self) -> str:
        return self._path

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def _local(self) -> Dict[str, Any]:
        return self._filters.setdefault(self.path, {})

    def _ensure_writable(self) -> None:
        if self.read_only:
            raise FilterStoreReadOnlyError(self.path)

    def _save(self) -> None:
        self._session_store.set({key: dict(value) for key, value in self._filters.items()})

    def track(self, keys: Union[str, Mapping[str, Any]], default: Any = None) -> 'FilterStore':
        """声明筛选键及默认值，并与请求参数、session 旧值合并。

        Args:
            keys: 筛选键名，或 {键名: 默认值} 字典
            default: keys 为单个键名时使用的默认值

        Returns:
            FilterStore: 自身，便于链式调用
        """
        self._ensure_writable()
        if not isinstance(keys, Mapping):
            keys = {keys: default}

        local = self._local
        changed = self._changed.setdefault(self.path, set())
        for name, declared in keys.items():
            declared = '' if declared is None else declared
            if name in self._params:
                incoming = self._params[name]
                if incoming is None:
                    incoming = ''
                if name in local and local[name] != incoming:
                    changed.add(name)
                local[name] = incoming
            elif name not in local:
                local[name] = declared
            self._defaults.setdefault(name, declared)

        logger.debug('筛选条件合并完成 path=%s filters=%s changed=%s', self.path, local, sorted(changed))
        self._save()
        return self

    def add(self, keys: Union[str, Mapping[str, Any]], default: Any = None) -> 'FilterStore':
        """track 的别名。"""
        return self.track(keys, default)

    def set(self, keys: Union[str, Mapping[str, Any]], value: Any = None) -> 'FilterStore':
        """直接写入筛选值，不读取请求参数。"""
        self._ensure_writable()
        if not isinstance(keys, Mapping):
            keys = {keys: value}
        self._local.update(keys)
        self._save()
        return self

    def get(self, name: Optional[str] = None, default: Any = None) -> Any:
        """未指定 name 时返回当前路径全部筛选条件的副本。"""
        if name is None:
            return dict(self._local)
        return self._local.get(name, default)

    def has(self, name: str) -> bool:
        return name in self._local

    def delete(self, names: Union[None, str, Iterable[str]] = None) -> 'FilterStore':
        """删除筛选条件；未指定 names 时清空当前路径，不存在的键忽略。"""
        self._ensure_writable()
        if names is None:
            self._local.clear()
        else:
            local = self._local
            for name in _as_names(names):
                local.pop(name, None)
        self._save()
        return self

    def reset(self, names: Union[None, str, Iterable[str]] = None) -> 'FilterStore':
        """恢复为声明的默认值；未指定 names 时恢复全部已声明的键。"""
        self._ensure_writable()
        local = self._local
        if names is None:
            local.update(self._defaults)
        else:
            for name in _as_names(names):
                if name not in self._defaults:
                    logger.warning('筛选键未声明默认值，忽略重置 path=%s name=%s', self.path, name)
                    continue
                local[name] = self._defaults[name]
        self._save()
        return self

    def changed(self, name: Optional[str] = None) -> Union[bool, Set[str]]:
        """本次请求中与 session 旧值不同的键；指定 name 时返回布尔值。"""
        names = self._changed.get(self.path, set())
        if name is None:
            return set(names)
        return name in names

    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    def get_global(self) -> Dict[str, Dict[str, Any]]:
        """返回 session 中所有页面的筛选条件。"""
        return {key: dict(value) for key, value in self._filters.items()}

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        # 与方法、属性同名的筛选键只能通过 get()/set()/delete() 访问
        if name.startswith('_') or hasattr(type(self), name):
            raise AttributeError(f'筛选键 {name!r} 与 FilterStore 成员同名，请使用 set()')
        self.set(name, value)

    def __delattr__(self, name: str) -> None:
        if name.startswith('_') or hasattr(type(self), name):
            raise AttributeError(f'筛选键 {name!r} 与 FilterStore 成员同名，请使用 delete()')
        self.delete(name)

    def __repr__(self) -> str:
        return f'<FilterStore path={self.path!r} filters={self._local!r}>'


def get_filter_store(path: Optional[str] = None) -> FilterStore:
    """获取筛选存储。

    不传 path 时返回当前请求、当前页面的存储（缓存在 flask.g 中，同一请求内共享）；
    传入 path 时每次新建一个只读存储，用于查看其他页面的筛选条件。
    """
    session_key = current_app.config.get('FILTER_SESSION_KEY', DEFAULT_SESSION_KEY)
    if path is not None:
        return FilterStore(FlaskSessionStore(session_key), get_request_params(), path, read_only=True)

    store = g.get('filter_store')
    if store is None:
        store = FilterStore(FlaskSessionStore(session_key), get_request_params(), get_current_path())
        g.filter_store = store
    return store


def track_filters(keys: Union[str, Mapping[str, Any]], default: Any = None) -> Dict[str, Any]:
    """在当前页面声明筛选键，返回本次生效的筛选条件。"""
    return get_filter_store().track(keys, default).get()
