from badgecard.main import run

run()
