from risk_analyzer.main import run

run()
