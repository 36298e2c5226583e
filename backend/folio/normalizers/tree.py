from .page import normalize_page_summary

def normalize_tree(tree):
    """{page: {child: {}}} -> [{...page, "children": [...]}] keeping sibling order."""
    return [
        {**normalize_page_summary(page), "children": normalize_tree(children)}
        for page, children in tree.items()
    ]
