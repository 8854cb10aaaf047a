def inc(x):
    return x + 1

def add(x, y):
    return x + y

def sum_cubes(n):
    s = 0
    with counted(i := 0, i < n, preinc(i)):
        j = 0
        while j < n:
            with counted(k := 0, True, postinc(k)):
                if k == n:
                    break
                s += add(i, add(j, k))
            j = inc(j)
    return s

result = sum_cubes(3)
# Sum over 0<=i,j,k<3 of (i+j+k) = 81
assert result == 81, "sum of cubes"
print(result)
