# -*- coding: UTF-8 -*-

from constants import logger

__all__=['Heap','HeapError']

class HeapError(RuntimeError):
    """
    the heap is not consistent, always an implementation defect
    """

class Heap:
    """
    Binary min-heap of (node,key) with back pointers from node to heap slot,
    so that the key of a queued node can be decreased in place.

    >>> heap=Heap(10)
    >>> heap.push(3,0.5); heap.push(7,0.2)
    >>> heap.decrease(3,0.1)
    >>> heap.pop()
    (3, 0.1)

    Refer to:
        Sethian J A. Fast marching methods[J]. SIAM review, 1999, 41(2): 199-235.
            Section 4, heap sort with back pointers
    """
    def __init__(self,maxLength,isTest=False):
        self.maxLength=maxLength
        self.isTest=isTest

        self.nodes=[]
        self.keys=[]
        # slot of each node in the heap, -1 if not queued
        self.heapPtr=[-1]*maxLength

    def __len__(self):
        return len(self.nodes)

    def empty(self):
        return len(self.nodes)==0

    def contains(self,node):
        return self.heapPtr[node]>=0

    def key(self,node):
        if not self.contains(node):
            raise HeapError('node %d is not in the heap'%node)
        return self.keys[self.heapPtr[node]]

    def clear(self):
        for node in self.nodes:
            self.heapPtr[node]=-1
        self.nodes=[]
        self.keys=[]

    def push(self,node,key):
        if self.contains(node):
            raise HeapError('node %d is already in the heap'%node)
        self.nodes.append(node)
        self.keys.append(key)
        self.heapPtr[node]=len(self.nodes)-1
        self.siftUp(len(self.nodes)-1)
        if self.isTest:
            self.test()

    def pop(self):
        """
        remove and return the (node,key) with the smallest key
        """
        if not self.nodes:
            raise IndexError('pop from empty heap')
        node,key=self.nodes[0],self.keys[0]
        last=len(self.nodes)-1
        self.swap(0,last)
        self.nodes.pop()
        self.keys.pop()
        self.heapPtr[node]=-1
        if self.nodes:
            self.siftDown(0)
        if self.isTest:
            self.test()
        return node,key

    def decrease(self,node,key):
        if not self.contains(node):
            raise HeapError('decrease of node %d which is not in the heap'%node)
        slot=self.heapPtr[node]
        if key>self.keys[slot]:
            raise HeapError('key of node %d would increase %g -> %g'%(node,self.keys[slot],key))
        self.keys[slot]=key
        self.siftUp(slot)
        if self.isTest:
            self.test()

    def swap(self,i,j):
        nodes,keys=self.nodes,self.keys
        nodes[i],nodes[j]=nodes[j],nodes[i]
        keys[i],keys[j]=keys[j],keys[i]
        self.heapPtr[nodes[i]]=i
        self.heapPtr[nodes[j]]=j

    def siftUp(self,slot):
        keys=self.keys
        while slot>0:
            parent=(slot-1)>>1
            if keys[slot]<keys[parent]:
                self.swap(slot,parent)
                slot=parent
            else:
                break

    def siftDown(self,slot):
        keys=self.keys
        n=len(keys)
        while True:
            child=2*slot+1
            if child>=n:
                break
            # smaller of the two children
            if child+1<n and keys[child+1]<keys[child]:
                child=child+1
            if keys[child]<keys[slot]:
                self.swap(slot,child)
                slot=child
            else:
                break

    def test(self):
        """
        check the heap property and the back pointers of the whole heap
        """
        n=len(self.nodes)
        for slot in range(n):
            node=self.nodes[slot]
            if self.heapPtr[node]!=slot:
                logger.error('heap back pointer of node %d is %d, expected %d'%(node,self.heapPtr[node],slot))
                raise HeapError('back pointer mismatch for node %d'%node)
            for child in (2*slot+1,2*slot+2):
                if child<n and self.keys[child]<self.keys[slot]:
                    logger.error('heap slot %d key %g > child slot %d key %g'%(slot,self.keys[slot],child,self.keys[child]))
                    raise HeapError('heap property violated at slot %d'%slot)
        if sum(1 for ptr in self.heapPtr if ptr>=0)!=n:
            raise HeapError('stale back pointers outside the heap')
        return True
