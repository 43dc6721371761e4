PIPE = "|"


def parse_command(line):
    """
    Split command line into pipeline stages.
    Returns: list of token lists, one per non-empty segment
    """
    stages = []
    for segment in line.split(PIPE):
        # No quoting: a token is any run of non-whitespace
        tokens = segment.strip().split()
        if tokens:
            stages.append(tokens)
    return stages
