# ABOUTME: Canned Google Books volumes API response fixtures for testing.
# ABOUTME: Covers a full volume, a sparse volume, and a mixed-language result set.

DUNE_VOLUME = {
    "kind": "books#volume",
    "id": "B1hSG45JCX4C",
    "volumeInfo": {
        "title": "Dune",
        "subtitle": "Deluxe Edition",
        "authors": ["Frank Herbert"],
        "publisher": "Penguin",
        "publishedDate": "1965-08-01",
        "description": "<p>Set on the desert planet <b>Arrakis</b>.</p>",
        "industryIdentifiers": [
            {"type": "ISBN_10", "identifier": "0441013597"},
            {"type": "ISBN_13", "identifier": "9780441013593"},
            {"type": "OTHER", "identifier": "OCLC:123"},
        ],
        "pageCount": 896,
        "categories": ["Fiction", "Science Fiction", "Fiction"],
        "imageLinks": {
            "smallThumbnail": "http://books.google.com/books/content?id=B1h&zoom=5&edge=curl",
            "thumbnail": "http://books.google.com/books/content?id=B1h&zoom=1&edge=curl",
        },
        "language": "en",
        "previewLink": "http://books.google.com/books?id=B1h&pg=PP1",
        "infoLink": "http://books.google.com/books?id=B1h",
        "canonicalVolumeLink": "https://books.google.com/books/about/Dune.html?id=B1h",
    },
}

SPARSE_VOLUME = {
    "id": "sparse",
    "volumeInfo": {"title": "Untitled Draft", "language": "en-GB"},
}

FRENCH_VOLUME = {
    "id": "fr1",
    "volumeInfo": {
        "title": "Dune (édition française)",
        "authors": ["Frank Herbert"],
        "publishedDate": "1970",
        "language": "fr",
    },
}

SEARCH_RESPONSE = {
    "kind": "books#volumes",
    "totalItems": 3,
    "items": [DUNE_VOLUME, FRENCH_VOLUME, SPARSE_VOLUME],
}

SEARCH_RESPONSE_EMPTY = {"kind": "books#volumes", "totalItems": 0}
