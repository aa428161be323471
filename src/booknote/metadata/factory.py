# ABOUTME: Provider factory selecting a BookProvider implementation from settings.
# ABOUTME: Providers receive only the settings they need plus a shared HTTP client.

from booknote.config import ServiceProvider, Settings
from booknote.metadata.calibre import CalibreProvider
from booknote.metadata.goodreads import GoodreadsProvider
from booknote.metadata.google_books import GoogleBooksProvider
from booknote.metadata.http import HttpClient
from booknote.metadata.openlibrary import OpenLibraryProvider
from booknote.metadata.provider import BookProvider


def _explicit_locale(settings: Settings) -> str:
    # Only Google resolves "default" to the process locale; the others keep every language.
    return "" if settings.locale_preference == "default" else settings.locale_preference


def create_provider(
    settings: Settings,
    http_client: HttpClient,
    override: str | None = None,
) -> BookProvider:
    """Create the provider named by override, or by settings.service_provider.

    Raises:
        ValueError: For an unknown provider name.
    """
    try:
        service = ServiceProvider(override or settings.service_provider)
    except ValueError as exc:
        raise ValueError("Unsupported service provider.") from exc

    if service is ServiceProvider.GOOGLE:
        return GoogleBooksProvider(
            http_client,
            locale_preference=settings.locale_preference,
            enable_edge_curl=settings.enable_cover_image_edge_curl,
            api_key=settings.api_key,
        )
    if service is ServiceProvider.OPENLIBRARY:
        return OpenLibraryProvider(http_client, locale_preference=_explicit_locale(settings))
    if service is ServiceProvider.GOODREADS:
        return GoodreadsProvider(http_client)
    return CalibreProvider(
        http_client,
        server_url=settings.calibre_server_url,
        library_id=settings.calibre_library_id,
        locale_preference=_explicit_locale(settings),
    )
