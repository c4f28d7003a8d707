"""netdriver: a task-driven driver for training and evaluating neural networks."""

from netdriver.containers import Container, container
from netdriver.settings import NetdriverSettings

__all__ = [
    "Container",
    "container",
    "NetdriverSettings",
]
