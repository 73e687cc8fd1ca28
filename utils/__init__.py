from utils.get_endpoint import get_endpoint
from utils.response_utils import extract_error_message, graphql_error_messages, robust_parse_text

__all__ = ["get_endpoint", "extract_error_message", "graphql_error_messages", "robust_parse_text"]
