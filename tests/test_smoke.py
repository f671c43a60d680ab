"""Public smoke tests for basic module wiring.

Keep these minimal and free of any real-world data.
"""

from __future__ import annotations


def test_imports() -> None:
    import receiptscan
    import receiptscan.application.scan
    import receiptscan.cli.main
    import receiptscan.domain
    import receiptscan.receipt.cached_receipt
    import receiptscan.runtime
    import receiptscan.runtime.frame_source
    import receiptscan.runtime.receipt_server

    assert receiptscan is not None
    assert receiptscan.application.scan is not None
    assert receiptscan.cli.main is not None
    assert receiptscan.domain is not None
    assert receiptscan.receipt.cached_receipt is not None
    assert receiptscan.runtime is not None
    assert receiptscan.runtime.frame_source is not None
    assert receiptscan.runtime.receipt_server is not None
