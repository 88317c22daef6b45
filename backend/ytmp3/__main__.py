from ytmp3.main import run

run()
