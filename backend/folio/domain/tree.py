from typing import Any, Callable, Dict, Iterable, Iterator, Optional
from flask import current_app
from folio.extensions import cache as default_cache
from folio.models.page import Page

ARRANGED_PAGES_KEY = "arranged_pages"

PageTree = Dict[Page, "PageTree"]
IdTree = Dict[str, "IdTree"]


def preordered(query=None):
    query = query if query is not None else Page.query
    return query.order_by(Page.path.asc(), Page.position.asc(), Page.slug.asc())


def arrange_pages(pages: Iterable[Page]) -> PageTree:
    """
    Arrange pages into a nested dict of the form {page => children}, where
    children = {} if the page has no children.

    `pages` must come ordered by path so parents are inserted before their
    children; each page walks its path segments down the dict, following the
    page whose slug matches the segment.
    """
    tree: PageTree = {}
    for page in pages:
        insertion = tree
        for segment in ["/"] + page.split_path:
            for parent, children in insertion.items():
                if parent.slug == segment:
                    insertion = children
                    break
        insertion[page] = {}
    return tree


def _to_ids(tree: PageTree) -> IdTree:
    return {page.id: _to_ids(children) for page, children in tree.items()}


def _walk_ids(tree: IdTree) -> Iterator[str]:
    for page_id, children in tree.items():
        yield page_id
        yield from _walk_ids(children)


def _hydrate(tree: IdTree, pages: Dict[str, Page]) -> PageTree:
    # Pages deleted since the arrangement was cached are left out
    return {
        pages[page_id]: _hydrate(children, pages)
        for page_id, children in tree.items()
        if page_id in pages
    }


def find_subtree(tree: PageTree, page: Page) -> Optional[PageTree]:
    for node, children in tree.items():
        if node.id == page.id:
            return children
        found = find_subtree(children, page)
        if found is not None:
            return found
    return None


class PageTreeArranger:
    """
    Builds and caches the arranged page tree.

    The cache only needs `get`, `set` and `delete` (a Flask-Caching `Cache` by
    default). It stores page ids, pages are reloaded on every `arrange` call.
    """

    def __init__(self, cache_backend=None, key: str = ARRANGED_PAGES_KEY):
        self._cache = cache_backend
        self.key = key

    @property
    def cache(self):
        return self._cache if self._cache is not None else default_cache

    def fetch(self, compute: Callable[[], Any]) -> Any:
        try:
            value = self.cache.get(self.key)
        except Exception as e:
            current_app.logger.warning(f"Page tree cache read failed, recomputing: {e}")
            value = None

        if value is None:
            value = compute()
            try:
                self.cache.set(self.key, value)
            except Exception as e:
                current_app.logger.warning(f"Page tree cache write failed: {e}")

        return value

    def invalidate(self) -> None:
        try:
            self.cache.delete(self.key)
        except Exception as e:
            current_app.logger.warning(f"Page tree cache delete failed: {e}")

    def arrange(self, root_page: Optional[Page] = None) -> PageTree:
        ids = self.fetch(lambda: _to_ids(arrange_pages(preordered().all())))

        wanted = list(_walk_ids(ids))
        pages = {page.id: page for page in Page.query.filter(Page.id.in_(wanted)).all()} if wanted else {}
        tree = _hydrate(ids, pages)

        if root_page is None:
            return tree

        children = find_subtree(tree, root_page)
        if children is None:
            return {}
        return {pages.get(root_page.id, root_page): children}


page_tree = PageTreeArranger()


def arrange(root_page: Optional[Page] = None) -> PageTree:
    return page_tree.arrange(root_page)


def clear_arranged_pages() -> None:
    # clear cache when a page changes
    page_tree.invalidate()
