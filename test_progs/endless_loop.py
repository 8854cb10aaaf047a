i = 0
with counted():
    i = i + 1
