import logging
import os

from django.apps import AppConfig
from django.conf import settings
from django.utils.module_loading import import_string

from .config_utils import load_provider_settings

logger = logging.getLogger("wikidata_search.apps")


class WikidataSearchConfig(AppConfig):
    name = "wikidata_search_provider"
    label = "wikidata_search_provider"
    path = os.path.dirname(os.path.abspath(__file__))
    verbose_name = "Wikidata Search Provider"
    provider_settings = None
    host = None

    def ready(self):
        self.provider_settings = load_provider_settings()

        host_path = getattr(settings, "WIKIDATA_SEARCH_PROVIDER_HOST", None)
        if not host_path:
            logger.debug("WIKIDATA_SEARCH_PROVIDER_HOST not set; provider not enabled")
            return

        from .extension import enable
        from .providers.search import WikidataSearchProvider

        self.host = import_string(host_path.replace(":", "."))
        dispatch = getattr(self.host, "dispatch", None)
        enable(self.host, WikidataSearchProvider(self.provider_settings, dispatch=dispatch))
