"""Ruby ecosystem adapter (bundler)."""

import re
from pathlib import Path

from autokit.ecosystems.base import Ecosystem, EcosystemRegistry, FrameworkProbe
from autokit.exceptions import EcosystemError

_RUBY_VERSION = re.compile(r"""(VERSION\s*=\s*)(["'])([^"']+)\2""")


@EcosystemRegistry.register
class RubyEcosystem(Ecosystem):
    """Ruby ecosystem. Priority 80.

    The version is the VERSION constant in lib/**/version.rb.
    """

    name = "ruby"
    display_name = "Ruby"
    priority = 80
    config_files = ["Gemfile", "*.gemspec"]
    lock_files = ["Gemfile.lock"]
    build_tool = "bundler"
    default_package_manager = "bundler"
    test_frameworks = [
        FrameworkProbe(
            framework_id="rspec",
            run_command=("bundle", "exec", "rspec"),
            coverage_command=("bundle", "exec", "rspec"),
            markers=(".rspec", "spec/spec_helper.rb"),
        ),
        FrameworkProbe(
            framework_id="minitest",
            run_command=("bundle", "exec", "rake", "test"),
            markers=("test/test_helper.rb",),
        ),
    ]

    def _version_file(self) -> Path:
        candidates = sorted(self.project_root.glob("lib/**/version.rb"))
        if not candidates:
            raise EcosystemError(
                "No lib/**/version.rb found",
                fix_hint="Define VERSION = '1.0.0' in lib/<gem>/version.rb",
            )
        return candidates[0]

    def get_version(self) -> str:
        path = self._version_file()
        match = _RUBY_VERSION.search(self._read_text(str(path.relative_to(self.project_root))))
        if not match:
            raise EcosystemError(f"No VERSION constant in {path.name}")
        return match.group(3)

    def set_version(self, version: str) -> list[Path]:
        relative = str(self._version_file().relative_to(self.project_root))
        updated, count = _RUBY_VERSION.subn(
            rf"\g<1>\g<2>{version}\g<2>", self._read_text(relative), count=1
        )
        if not count:
            raise EcosystemError(f"No VERSION constant in {relative}")
        return [self._write_text(relative, updated)]

    def lint_commands(self) -> list[list[str]]:
        return [["bundle", "exec", "rubocop"]]
