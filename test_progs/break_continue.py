def main():
    assert test_do() == 5, "failed. 1"
    assert test_while() == 5, "failed. 2"
    assert test_for() == 4, "failed. 3"
    test_for_empty()

    print("done.")


def test_do():
    i = 0
    with do_while(postinc(i) < 10):
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        j = 0
        with do_while(postinc(j) < 5):
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

    return i


def test_while():
    i = 0
    while postinc(i) < 10:
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        j = 0
        while postinc(j) < 5:
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

    return i


def test_for():
    j = 0
    with counted(i := 0, i < 10, postinc(i)):
        if i == 5:
            break

        if i == 2:
            continue

        print("i = ", i)

        with counted(j := 0, j < 5, postinc(j)):
            if j == 3:
                break

            if j == 2:
                continue

            print("j = ", j)

        j = i

    return j


def test_for_empty():
    with counted():
        break
