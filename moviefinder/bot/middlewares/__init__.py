from moviefinder.bot.middlewares.log_context import ChatContextMiddleware
from moviefinder.bot.middlewares.throttle import ThrottleMiddleware

__all__ = ["ChatContextMiddleware", "ThrottleMiddleware"]
