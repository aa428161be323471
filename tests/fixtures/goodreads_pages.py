# ABOUTME: Canned Goodreads HTML pages for testing the scraper.
# ABOUTME: Provides a search results table and a book page with __NEXT_DATA__ and JSON-LD blocks.

SEARCH_PAGE = """
<html><body>
<table class="tableList">
  <tr itemscope itemtype="http://schema.org/Book">
    <td><img class="bookCover" src="https://i.gr-assets.com/images/S/dune._SY75_.jpg"></td>
    <td>
      <a class="bookTitle" href="/book/show/44767458-dune"><span>Dune</span></a>
      <a class="authorName" href="/author/show/58.Frank_Herbert"><span>Frank Herbert</span></a>
    </td>
  </tr>
  <tr>
    <td>
      <a class="bookTitle" href="https://www.goodreads.com/book/show/1-messiah">Dune "Messiah"</a>
    </td>
  </tr>
  <tr><td>No link in this row</td></tr>
</table>
</body></html>
"""

BOOK_PAGE = """
<html>
<head>
<link rel="canonical" href="https://www.goodreads.com/book/show/44767458-dune">
<script type="application/ld+json">
{"@context": "https://schema.org", "@type": "Book", "name": "Dune",
 "image": "https://images.gr-assets.com/books/dune._SX318_.jpg",
 "isbn": "9780593099322", "numberOfPages": 658}
</script>
</head>
<body>
<h1 data-testid="bookTitle">Dune</h1>
<span class="ContributorLink__name" data-testid="name">Frank Herbert</span>
<span class="ContributorLink__name" data-testid="name">Frank Herbert</span>
<div data-testid="description"><span class="Formatted">Set on the "desert" planet Arrakis.</span></div>
<ul aria-label="Top genres for this book">
  <a class="Button--tag" href="/genres/science-fiction">Science Fiction</a>
  <a class="Button--tag" href="/genres/fiction">Fiction</a>
</ul>
<p data-testid="pagesFormat">658 pages, Hardcover</p>
<script id="__NEXT_DATA__" type="application/json">
{"props":{"pageProps":{"apolloState":{"Work:kca://work/1":{"details":{"originalTitle":"Dune","publicationTime":-139449600000}},
"Book:kca://book/1":{"details":{"publisher":"Ace","isbn":"0593099320"}}}}}}
</script>
</body>
</html>
"""

MINIMAL_BOOK_PAGE = """
<html><body><h1 id="bookTitle">A "Quoted" Title</h1></body></html>
"""
