from monitor.middleware.correlation import REQUEST_ID_HEADER, CorrelationMiddleware

__all__ = ["CorrelationMiddleware", "REQUEST_ID_HEADER"]
