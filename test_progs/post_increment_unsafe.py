def count():
    i = 0
    while postinc(i) < 3:
        print("i = ", i)
    return i


def main():
    # the failing final test increments i as well, count() returns 4
    assert count() == 3, "final test did not increment"
    print("unreachable")
