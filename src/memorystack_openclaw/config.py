"""Plugin configuration for the MemoryStack plugin."""

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# ============================================
# Environment
# ============================================
MEMORYSTACK_API_KEY = 'MEMORYSTACK_API_KEY'
MEMORYSTACK_BASE_URL = 'MEMORYSTACK_BASE_URL'

# ============================================
# Defaults
# ============================================
DEFAULT_MEMORYSTACK_BASE_URL = 'https://memorystack.app'
DEFAULT_AUTO_RECALL = True
DEFAULT_AUTO_CAPTURE = True
DEFAULT_MAX_RECALL_RESULTS = 5
MIN_RECALL_RESULTS = 1
MAX_RECALL_RESULTS = 20


class MemoryStackConfig(BaseModel):
    """
    Resolved plugin configuration.

    Host plugin configs use camelCase keys (``apiKey``, ``autoRecall``);
    snake_case field names are accepted as well.
    """

    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(default='', alias='apiKey')
    base_url: str = Field(default=DEFAULT_MEMORYSTACK_BASE_URL, alias='baseUrl')
    auto_recall: bool = Field(default=DEFAULT_AUTO_RECALL, alias='autoRecall')
    auto_capture: bool = Field(default=DEFAULT_AUTO_CAPTURE, alias='autoCapture')
    max_recall_results: int = Field(
        default=DEFAULT_MAX_RECALL_RESULTS,
        ge=MIN_RECALL_RESULTS,
        le=MAX_RECALL_RESULTS,
        alias='maxRecallResults',
    )
    debug: bool = False


def parse_config(raw: Optional[Mapping[str, Any]] = None) -> MemoryStackConfig:
    """
    Build the plugin configuration from the host's raw plugin config.

    Unset or empty values fall back to the environment and then to the
    defaults above. Out-of-range values raise ``pydantic.ValidationError``.
    """
    values = {k: v for k, v in dict(raw or {}).items() if v is not None and v != ''}
    config = MemoryStackConfig.model_validate(values)
    if not config.api_key:
        config.api_key = os.environ.get(MEMORYSTACK_API_KEY, '')
    if 'baseUrl' not in values and 'base_url' not in values and os.environ.get(MEMORYSTACK_BASE_URL):
        config.base_url = os.environ[MEMORYSTACK_BASE_URL]
    return config
