from .page_part import normalize_part

def normalize_page_summary(page):
    return {
        "id": page.id,
        "identifier": page.identifier,
        "title": page.title,
        "url": page.url,
        "position": page.position,
        "depth": page.depth
    }

def normalize_page(page, admin=False):
    parts = sorted(page.parts, key=lambda p: p.position)

    data = normalize_page_summary(page)
    data.update({
        "path": page.path,
        "slug": page.slug,
        "parent_url": page.parent_url,
        "seo": page.seo,
        "parts": [
            normalize_part(p, admin=admin)
            for p in parts
        ]
    })

    if admin:
        data["template_id"] = page.template_id
        data["meta_seo"] = page.meta_seo or {}
        data["slugs_backup"] = page.slugs_backup

    return data
