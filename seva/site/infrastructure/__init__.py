"""Site infrastructure: packaged content and the email relay client."""

from seva.site.infrastructure.content import YamlContentStore
from seva.site.infrastructure.email_relay import HttpEmailRelay

__all__ = ["YamlContentStore", "HttpEmailRelay"]
