"""Utility modules for fetch-client."""

from .payload import FormData, is_json_serializable, is_payload_method, is_stream_like, serialize_body
from .query import join_url, parse_query, stringify_query, with_query
from .sanitizer import add_sensitive_keys, mask_sensitive_data, sanitize_url

__all__ = [
    'FormData',
    'is_json_serializable',
    'is_payload_method',
    'is_stream_like',
    'serialize_body',
    'join_url',
    'parse_query',
    'stringify_query',
    'with_query',
    'add_sensitive_keys',
    'mask_sensitive_data',
    'sanitize_url',
]
