"""链路追踪

基于 OpenTelemetry，为每次 ChatClient 调用生成 trace id。
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor

from studio.core.config import settings

logger = logging.getLogger(__name__)

_provider: Optional[TracerProvider] = None


def init_tracing() -> TracerProvider:
    """初始化全局 TracerProvider（只初始化一次）"""
    global _provider

    if _provider is not None:
        return _provider

    _provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.tracing_service_name})
    )
    if settings.tracing_console_export:
        _provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(_provider)
    logger.info(f"链路追踪已初始化 (service={settings.tracing_service_name})")
    return _provider


def get_tracer(name: str = "studio") -> trace.Tracer:
    """获取 Tracer

    追踪开启时使用 SDK TracerProvider，保证 span 拥有有效的 trace id。
    """
    if settings.tracing_enabled:
        return init_tracing().get_tracer(name)
    return trace.get_tracer(name)


def current_trace_id() -> Optional[str]:
    """获取当前 span 的 trace id（32 位十六进制），无有效 span 时返回 None"""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return trace.format_trace_id(span_context.trace_id)
