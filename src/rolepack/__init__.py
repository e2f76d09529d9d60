__version__ = "0.1.0"

from .model import Package, RoleJob, Role
from .errors import PackError, UsageError, DependencyError, FilesystemError, TemplateError, StreamError
from .catalog import ImageCatalog, ImageRecord, DockerImageCatalog, MemoryImageCatalog
from .naming import image_reference
from .builder import PackagesImageBuilder

__all__ = [
    "Package", "RoleJob", "Role",
    "PackError", "UsageError", "DependencyError", "FilesystemError", "TemplateError", "StreamError",
    "ImageCatalog", "ImageRecord", "DockerImageCatalog", "MemoryImageCatalog",
    "image_reference", "PackagesImageBuilder",
]
