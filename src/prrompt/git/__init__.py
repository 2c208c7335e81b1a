"""Git access for prrompt."""

from prrompt.git.fake import FakeGitGateway
from prrompt.git.gateway import CommandGitGateway, GitGateway

__all__ = ["CommandGitGateway", "FakeGitGateway", "GitGateway"]
