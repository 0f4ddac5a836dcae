"""Thread safety tests for the shared engine.

Renders run concurrently against one engine; the shared instance must be
built exactly once even when many threads race to first use.

These tests use real threading to catch actual concurrency bugs.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import changerawr_markdown.engine as engine_module
from changerawr_markdown import create_engine, get_engine, render_markdown

DOCUMENTS = [
    "# Title {i}\n\nParagraph **{i}**",
    "| a | b |\n|---|---|\n| {i} | x |",
    "[button:Go {i}](https://x.com/{i}){{success,lg}}",
    ":::info Note {i}\nBody {i}\n:::",
    "- one {i}\n- two\n\n-# sub {i}",
    "```py\nprint({i})\n```",
]


class TestEngineThreadSafety:
    def test_concurrent_renders_match_serial(self) -> None:
        sources = [doc.format(i=i) for i in range(20) for doc in DOCUMENTS]
        expected = [render_markdown(source) for source in sources]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render_markdown, sources))

        assert results == expected

    def test_shared_engine_built_once(self, monkeypatch) -> None:
        calls: list[int] = []
        original = engine_module.create_engine

        def counting_create_engine(*args, **kwargs):
            calls.append(1)
            return original(*args, **kwargs)

        monkeypatch.setattr(engine_module, "create_engine", counting_create_engine)

        barrier = threading.Barrier(16)
        engines: list[object] = []
        lock = threading.Lock()

        def first_use() -> None:
            barrier.wait()
            built = get_engine()
            with lock:
                engines.append(built)

        threads = [threading.Thread(target=first_use) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert all(built is engines[0] for built in engines)

    def test_independent_engines_share_nothing(self) -> None:
        errors: list[str] = []

        def work(thread_id: int) -> None:
            try:
                engine = create_engine()
                for i in range(20):
                    html = engine.render(f"# Heading\n\n# Heading\n\nrun {thread_id}-{i}")
                    if 'id="heading-1"' not in html:
                        errors.append(f"thread {thread_id}: slug state leaked")
            except Exception as exc:
                errors.append(f"thread {thread_id}: {exc}")

        threads = [threading.Thread(target=work, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
