"""Run a small build pipeline in dependency order.

Each step declares the step that must run before it. The catalog wires
those declarations into a graph and the runner executes the steps against
a shared build context.
"""

import logging
from dataclasses import dataclass, field

import topograph as tg


@dataclass
class BuildContext:
    sources: list[str]
    artifacts: list[str] = field(default_factory=list)


class Fetch(tg.Action[BuildContext]):
    def process_loop(self, source: BuildContext) -> bool:
        self.sink.info("Fetching %d sources", len(source.sources))
        return bool(source.sources)


class Compile(tg.Action[BuildContext]):
    def process_loop(self, source: BuildContext) -> bool:
        source.artifacts.extend(f"{name}.o" for name in source.sources)
        return True


class Link(tg.Action[BuildContext]):
    def process_loop(self, source: BuildContext) -> bool:
        source.artifacts.append("app")
        return True


class Package(tg.Action[BuildContext]):
    def initialize(self, source: BuildContext) -> bool:
        return "app" in source.artifacts

    def process_loop(self, source: BuildContext) -> bool:
        source.artifacts.append("app.tar.gz")
        return True


catalog = tg.PredecessorCatalog[str, tg.Processor[BuildContext]]()
catalog.register("fetch", Fetch())
catalog.register("compile", Compile(), predecessor="fetch")
catalog.register("link", Link(), predecessor="compile")
catalog.register("package", Package(), predecessor="link")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    runner = tg.ProcessorRunner.from_catalog(
        catalog,
        tg.get_config(),
        equality=tg.TypeEquality(),
        finalize=lambda ctx: bool(ctx.artifacts),
    )
    context = BuildContext(sources=["main", "util"])
    result = runner.run(context)

    for outcome in result.outcomes:
        status = "ok" if outcome.succeeded else f"failed ({outcome.error or 'returned False'})"
        print(f"{type(outcome.item).__name__:<8} {status}")  # noqa: T201
    print(f"artifacts: {context.artifacts}")  # noqa: T201


if __name__ == "__main__":
    main()
