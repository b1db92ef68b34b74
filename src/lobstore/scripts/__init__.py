# Command line tools
