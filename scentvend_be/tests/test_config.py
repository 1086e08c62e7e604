import importlib

from scentvend import config


def test_dotenv_fills_unset_variables(tmp_path, monkeypatch):
    monkeypatch.setenv("PAYMENT_CURRENCY", "INR")
    monkeypatch.delenv("PAYMENT_CURRENCY")
    monkeypatch.setenv("BOTTLE_STOCK_LIMIT", "12")
    (tmp_path / ".env").write_text("PAYMENT_CURRENCY=EUR\nBOTTLE_STOCK_LIMIT=30\n")
    monkeypatch.chdir(tmp_path)

    try:
        reloaded = importlib.reload(config)
        assert reloaded.Settings.PAYMENT_CURRENCY == "EUR"
        # Real environment wins over the file
        assert reloaded.Settings.BOTTLE_STOCK_LIMIT == 12
    finally:
        monkeypatch.undo()
        importlib.reload(config)
