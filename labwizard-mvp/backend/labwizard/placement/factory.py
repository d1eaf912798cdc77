"""
工厂函数：根据 settings.LABWIZARD_ORDER_PLACER 返回对应的 placer 实例。

新增 placer 只需：
  1. 在 services.py 新建 XxxOrderPlacer(BaseOrderPlacer) 类
  2. 在此处 _build_registry() 加一行
  不需要修改 store.py。
"""

from django.conf import settings

from .base import BaseOrderPlacer

# 每个 placer 名在进程内只实例化一次
_instances: dict[str, BaseOrderPlacer] = {}


def _build_registry() -> dict[str, type[BaseOrderPlacer]]:
    from .services import InMemoryOrderPlacer, LoggingOrderPlacer

    return {
        "memory": InMemoryOrderPlacer,
        "log":    LoggingOrderPlacer,
    }


def get_order_placer() -> BaseOrderPlacer:
    """
    从 settings.LABWIZARD_ORDER_PLACER 读取 placer 名，返回对应实例。

    settings.LABWIZARD_ORDER_PLACER 由环境变量 LABWIZARD_ORDER_PLACER 控制（默认 "memory"）。
    同一个名字总是返回同一个实例：默认配置下提交的订单可以通过
    get_order_placer().placed 取回。

    Raises:
        ValueError: LABWIZARD_ORDER_PLACER 未知
    """
    name = getattr(settings, "LABWIZARD_ORDER_PLACER", "memory")
    registry = _build_registry()
    placer_cls = registry.get(name)

    if placer_cls is None:
        raise ValueError(
            f"Unknown LABWIZARD_ORDER_PLACER: {name!r}. "
            f"Known placers: {list(registry.keys())}"
        )

    if name not in _instances:
        _instances[name] = placer_cls()
    return _instances[name]
