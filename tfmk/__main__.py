from tfmk.cli import cli

cli(prog_name="tfmk")
