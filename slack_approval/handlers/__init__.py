from .actions import register_actions
from .base import HandlerDependencies
