"""CLI 输出测试"""

from tripvoice import cli


def test_expense_prefix():
    output = cli.handle("记账 打车花了50元")
    assert "¥50" in output
    assert "交通" in output


def test_expense_flag_no_match():
    assert "手动输入" in cli.handle("--expense 随便说点什么")


def test_trip_request():
    output = cli.handle("我和女朋友想去上海玩2天，预算3000")
    assert "上海" in output
    assert "人数：2" in output
    assert "还需要补充" not in output


def test_trip_request_missing_fields():
    assert "目的地" in cli.handle("喜欢美食").split("还需要补充")[1]


def test_main_single_shot(monkeypatch, capsys):
    monkeypatch.setattr("sys.argv", ["tripvoice", "记账", "买了80元纪念品"])
    cli.main()
    out = capsys.readouterr().out
    assert "购物" in out
    assert "纪念品" in out


def test_interactive_quit(monkeypatch, capsys):
    inputs = iter(["记账 午餐花了35元", "quit"])
    monkeypatch.setattr("sys.argv", ["tripvoice"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
    cli.main()
    out = capsys.readouterr().out
    assert "餐饮" in out
    assert "再见" in out
