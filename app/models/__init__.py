"""Model exports for backend records."""

from app.models.blog import Author, Blog, BlogDetailResponse, BlogListResponse, UploadResult

__all__ = ["Author", "Blog", "BlogDetailResponse", "BlogListResponse", "UploadResult"]
