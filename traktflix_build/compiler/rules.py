"""Module rules: which transform applies to which source file."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, Mapping, Optional, Tuple, Union

from ..schemas.config import BuildConfig, BuildMode

SETTINGS_MODULE = r"settings\.js$"
FONT_FILES = r"\.(woff(2)?|ttf|eot|svg)(\?v=\d+\.\d+\.\d+)?$"
IMAGE_FILES = r"\.(jpg|png)$"
STYLE_FILES = r"\.css$"
SCRIPT_FILES = r"\.jsx?$"
VENDOR_DIRS = r"(node_modules|bower_components)"


def _matches(pattern: str, path: Union[str, PurePath]) -> bool:
    return re.search(pattern, PurePath(path).as_posix()) is not None


@dataclass(frozen=True, slots=True)
class Loader:
    name: str
    options: Mapping[str, object] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"loader": self.name}
        if self.options:
            payload["options"] = dict(self.options)
        return payload


@dataclass(frozen=True, slots=True)
class TextReplaceRule:
    """Exact placeholder replacement on matching modules."""

    test: str
    replacements: Tuple[Tuple[str, str], ...]

    def matches(self, path: Union[str, PurePath]) -> bool:
        return _matches(self.test, path)

    def apply(self, text: str) -> str:
        """Replace every placeholder in one pass so substituted values are never rescanned."""

        if not self.replacements:
            return text
        lookup = dict(self.replacements)
        pattern = re.compile("|".join(re.escape(token) for token in sorted(lookup, key=len, reverse=True)))
        return pattern.sub(lambda match: lookup[match.group(0)], text)

    def to_dict(self) -> Dict[str, object]:
        return {
            "test": self.test,
            "loader": "string-replace-loader",
            "options": {
                "multiple": [{"search": search, "replace": replace} for search, replace in self.replacements],
            },
        }


@dataclass(frozen=True, slots=True)
class AssetRule:
    """Emit matching files under ``output_path`` as ``[name].[ext]``."""

    test: str
    output_path: str
    public_path: str
    name: str = "[name].[ext]"

    def matches(self, path: Union[str, PurePath]) -> bool:
        return _matches(self.test, path)

    def emitted_name(self, path: Union[str, PurePath]) -> str:
        pure = PurePath(path)
        return self.name.replace("[name]", pure.stem).replace("[ext]", pure.suffix.lstrip("."))

    def to_dict(self) -> Dict[str, object]:
        return {
            "test": self.test,
            "loader": "file-loader",
            "options": {
                "name": self.name,
                "outputPath": self.output_path,
                "publicPath": self.public_path,
            },
        }


@dataclass(frozen=True, slots=True)
class LoaderRule:
    """A loader chain handed to the bundler unchanged."""

    test: str
    loaders: Tuple[Loader, ...]
    exclude: Optional[str] = None

    def matches(self, path: Union[str, PurePath]) -> bool:
        if self.exclude and _matches(self.exclude, path):
            return False
        return _matches(self.test, path)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"test": self.test}
        if self.exclude:
            payload["exclude"] = self.exclude
        if len(self.loaders) == 1:
            payload.update(self.loaders[0].to_dict())
        else:
            payload["loaders"] = [loader.to_dict() for loader in self.loaders]
        return payload


Rule = Union[TextReplaceRule, AssetRule, LoaderRule]


def secret_replace_rule(config: BuildConfig) -> TextReplaceRule:
    return TextReplaceRule(test=SETTINGS_MODULE, replacements=tuple(config.substitutions().items()))


def build_rules(substitution: BuildConfig, *, mode: BuildMode, test: bool = False) -> Tuple[Rule, ...]:
    """Module rules in bundler order. ``substitution`` feeds the settings module."""

    return (
        secret_replace_rule(substitution),
        AssetRule(test=FONT_FILES, output_path="./fonts", public_path="../fonts/"),
        AssetRule(test=IMAGE_FILES, output_path="./images/", public_path="../images/"),
        LoaderRule(
            test=STYLE_FILES,
            loaders=(
                Loader("style-loader", {"injectType": "singletonStyleTag", "insert": "html"}),
                Loader("css-loader"),
            ),
        ),
        LoaderRule(
            test=SCRIPT_FILES,
            exclude=VENDOR_DIRS,
            loaders=(
                Loader(
                    "babel-loader",
                    {
                        "envName": "test" if test else mode.value,
                        "presets": ["@babel/preset-env", "@babel/preset-react"],
                    },
                ),
            ),
        ),
    )
