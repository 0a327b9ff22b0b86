from .requests import IntentParserRequest, IntentMatchRequest, SwapExecutionRequest
from .responses import IntentMatchResponse, SwapExecutionResponse, TokenDataResponse

__all__ = [
    "IntentParserRequest",
    "IntentMatchRequest",
    "SwapExecutionRequest",
    "IntentMatchResponse",
    "SwapExecutionResponse",
    "TokenDataResponse",
]
