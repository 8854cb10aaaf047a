# break and continue only ever leave the innermost loop, whatever its form
def mixed():
    total = 0
    n = 0
    with do_while(postinc(n) < 3):
        with counted(k := 0, k < 4, postinc(k)):
            if k == 1:
                continue
            m = 0
            while preinc(m) < 10:
                if m == 3:
                    break
                total += m
            if k == 3:
                break
            total += 100
    return total


def main():
    total = mixed()
    assert total == 836, "mixed loops"
    print("total = ", total)
