from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import event, inspect, or_
from sqlalchemy.orm import column_property, validates
from slugify import slugify
from folio.domain.invariants.exceptions import AmbiguousPathError
from folio.extensions import db
from folio.utils.text import is_blank, normalize_path
from .base import BaseModel
from .template import fields_schema

class Page(BaseModel):
    """
    A node of the content tree.

    Pages carry no parent pointer: the hierarchy is read from `path`, the url
    of the parent page ("/" for top level pages). `url` is `path + slug + "/"`.
    """
    __tablename__ = 'pages'

    path = db.Column(db.String(500), nullable=False, default="/", index=True)
    slug = column_property(db.Column(db.String(200), nullable=True, index=True), active_history=True)
    title = db.Column(db.String(200), nullable=False)
    identifier = db.Column(db.String(100), unique=True, nullable=False, index=True)
    template_id = db.Column(db.String(36), db.ForeignKey("templates.id"), nullable=True, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    meta_seo = db.Column(db.JSON, nullable=False, default=dict)

    # One previous slug per line, each line newline terminated
    slugs_backup_text = db.Column("slugs_backup", db.Text, nullable=False, default="")

    __table_args__ = (
        db.UniqueConstraint("path", "slug", name="uq_page_slug_per_path"),
        db.Index("idx_page_path_position", "path", "position"),
    )

    template = db.relationship("Template", back_populates="pages")

    # Relationship to PageParts (ordered, cascade deletes)
    parts = db.relationship(
        "PagePart",
        back_populates="page",
        order_by="PagePart.position",
        cascade="all, delete-orphan"
    )

    using_slug_backup = False

    # per instance memos, not mapped
    _seo_cache = None
    _parent_cache = None
    _schema_cache = None

    # -------------------------------------------------
    # Normalizing setters
    # -------------------------------------------------

    @validates("slug")
    def _normalize_slug(self, key, value):
        if is_blank(value):
            return None
        return slugify(str(value)) or None

    @validates("path")
    def _normalize_path(self, key, value):
        self._parent_cache = None
        return normalize_path(value)

    @validates("meta_seo")
    def _reset_seo(self, key, value):
        self._seo_cache = None
        return dict(value or {})

    @validates("template_id")
    def _reset_schema(self, key, value):
        self._schema_cache = None
        return value

    # -------------------------------------------------
    # Slug history
    # -------------------------------------------------

    @property
    def slugs_backup(self) -> List[str]:
        return [line for line in (self.slugs_backup_text or "").split("\n") if line]

    @slugs_backup.setter
    def slugs_backup(self, slugs):
        unique: List[str] = []
        for slug in slugs or ():
            if slug and slug not in unique:
                unique.append(slug)
        self.slugs_backup_text = "".join(f"{slug}\n" for slug in unique)

    def add_slug_backup(self, slug: str) -> None:
        self.slugs_backup = self.slugs_backup + [slug]

    # -------------------------------------------------
    # Lookups
    # -------------------------------------------------

    @staticmethod
    def path_and_slug(full_url: str) -> Tuple[str, Optional[str]]:
        """"/a/b/c/" -> ("/a/b/", "c"), "/" -> ("/", None)"""
        segments = full_url.lstrip("/").split("/")
        while segments and segments[-1] == "":
            segments.pop()
        if not segments:
            return "/", None
        *path, slug = segments
        return ("/" + "".join(f"{s}/" for s in path) if path else "/"), slug

    @classmethod
    def find_by_url(cls, full_url: Optional[str]) -> Optional["Page"]:
        """
        Page living at `full_url`. When no page currently has that slug, a page
        on the same path that used it before is returned with
        `using_slug_backup` set, callers should redirect to its `url`.
        """
        if not full_url:
            return None
        path, slug = cls.path_and_slug(full_url)

        query = cls.query.filter(cls.path == path)
        if slug is None:
            query = query.filter(or_(cls.slug.is_(None), cls.slug == ""))
        else:
            query = query.filter(cls.slug == slug)
        page = query.order_by(cls.position.asc()).first()
        if page is not None:
            # identity mapped, may still carry the flag from an earlier lookup
            page.using_slug_backup = False

        if slug and page is None:
            page = cls._find_by_slug_backup(path, slug)
            if page is not None:
                page.using_slug_backup = True

        return page

    @classmethod
    def _find_by_slug_backup(cls, path: str, slug: str) -> Optional["Page"]:
        escaped = slug.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        candidates = (
            cls.query
            .filter(cls.path == path)
            .filter(or_(
                cls.slugs_backup_text.like(f"{escaped}\n%", escape="\\"),
                cls.slugs_backup_text.like(f"%\n{escaped}\n%", escape="\\"),
            ))
            .order_by(cls.position.asc())
            .all()
        )
        for page in candidates:
            if slug in page.slugs_backup:
                return page
        return None

    @classmethod
    def root(cls) -> Optional["Page"]:
        # Homepage is the first ranked page of the root path
        return (
            cls.query
            .filter(cls.path == "/")
            .order_by(cls.position.asc(), cls.slug.asc())
            .first()
        )

    @classmethod
    def homepage(cls) -> Optional["Page"]:
        return cls.root()

    @property
    def is_root(self) -> bool:
        root = Page.root()
        return root is not None and root.id == self.id

    # -------------------------------------------------
    # Content
    # -------------------------------------------------

    @property
    def template_schema(self) -> Dict[str, Dict[str, Any]]:
        if self._schema_cache is None:
            if self.template is not None:
                self._schema_cache = dict(self.template.fields or {})
            else:
                self._schema_cache = fields_schema(self.template_id)
        return self._schema_cache

    def part(self, identifier: str):
        for part in self.parts:
            if part.identifier == identifier:
                return part
        return None

    def resolve(self, dotted_path: str):
        """
        page.resolve("intro")          -> the "intro" part
        page.resolve("intro.title")    -> value of its "title" field
        page.resolve("slideshow")      -> [parts] when the template marks it repeatable
        """
        segments = dotted_path.split(".")
        parts = sorted(
            (p for p in self.parts if p.identifier == segments[0]),
            key=lambda p: p.position or 0,
        )

        descriptor = self.template_schema.get(segments[0]) or {}
        if descriptor.get("repeatable"):
            if len(segments) != 1:
                raise AmbiguousPathError(
                    f"Part '{segments[0]}' is repeatable, iterate over page.resolve('{segments[0]}') instead of '{dotted_path}'"
                )
            return parts

        if not parts:
            return None
        part = parts[0]
        return part if len(segments) == 1 else part.resolve(segments[-1])

    get = resolve

    # -------------------------------------------------
    # SEO: children inherit their parent's settings and may override them
    # -------------------------------------------------

    @property
    def seo(self) -> Dict[str, str]:
        if self._seo_cache is None:
            seo = dict(self.meta_seo or {})
            parent = self.parent
            if parent is not None:
                seo = {**parent.seo, **seo}
            if not self.is_root:
                root = Page.root()
                if root is not None:
                    seo = {**root.seo, **seo}
            self._seo_cache = seo
        return self._seo_cache

    @seo.setter
    def seo(self, values):
        self.meta_seo = dict(values or {})

    def clear_cached_attributes(self) -> None:
        self._seo_cache = None
        self._parent_cache = None
        self._schema_cache = None

    # -------------------------------------------------
    # Tree
    # -------------------------------------------------

    @property
    def url(self) -> str:
        if is_blank(self.slug):
            return "/"
        return f"{self.path}{self.slug}/"

    @property
    def split_path(self) -> List[str]:
        """"/about/team/" -> ["about", "team"]"""
        return [segment for segment in (self.path or "/").split("/") if segment]

    @property
    def depth(self) -> int:
        # root is depth 0
        return len(self.split_path)

    @property
    def parent(self) -> Optional["Page"]:
        if self._parent_cache is None:
            parent = Page.find_by_url(self.path) if self.path else None
            if parent is not None and (parent is self or parent.id == self.id):
                parent = None
            self._parent_cache = (parent,)
        return self._parent_cache[0]

    def set_parent(self, new_parent: Optional["Page"]) -> None:
        self.path = new_parent.url if new_parent is not None else "/"

    @property
    def parent_url(self) -> str:
        parent = self.parent
        return parent.url if parent is not None else "/"

    def parent_url_options(self) -> List[str]:
        """Urls this page could be moved under (every other page, plus "/")."""
        urls = {"/"}
        for page in Page.query.all():
            if page.id != self.id:
                urls.add(page.url)
        return sorted(urls)

    def children(self) -> List["Page"]:
        return (
            Page.query
            .filter(Page.path == self.url, Page.id != self.id)
            .order_by(Page.position.asc(), Page.slug.asc())
            .all()
        )

    def siblings(self) -> List["Page"]:
        return (
            Page.query
            .filter(Page.path == self.path, Page.id != self.id)
            .order_by(Page.position.asc(), Page.slug.asc())
            .all()
        )

    def __repr__(self):
        return f"<Page {self.identifier} {self.url}>"


@event.listens_for(Page, "before_update")
def update_slugs_backup(mapper, connection, target):
    history = inspect(target).attrs.slug.history
    if not history.has_changes() or not history.deleted:
        return
    previous = history.deleted[0]
    if previous:
        target.add_slug_backup(previous)
